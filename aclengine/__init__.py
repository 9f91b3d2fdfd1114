"""aclengine - Windows-style ACL evaluation and editing engine."""

from .core import (
    ACE,
    AclDomain,
    Effect,
    Permission,
    PermissionEngine,
    PermissionGroup,
)

__version__ = "0.1.0"

__all__ = [
    "ACE",
    "AclDomain",
    "Effect",
    "Permission",
    "PermissionEngine",
    "PermissionGroup",
]
