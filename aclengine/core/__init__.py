"""Permission evaluation and mutation engine.

Evaluates and edits an ordered allow/deny ACL model with nested groups,
inheritance down a file tree, and named permission groups.
"""

from .catalog import Effect, Permission, PermissionGroup
from .directory import Group, PrincipalDirectory, User
from .store import ACE, AclStore, File
from .errors import (
    AclEngineError,
    CycleDetected,
    GroupAttributed,
    InheritedGrant,
    UnknownFile,
    UnknownPrincipal,
)
from .evaluator import EffectivePermissions, Explanation, PermissionEvaluator, explanation_text
from .aggregator import GroupState, GroupedPermissions, PermissionAggregator
from .attribution import GroupAttributionChecker
from .mutation import MutationEngine, MutationResult
from .engine import AclDomain, PermissionEngine

__all__ = [
    "ACE",
    "AclDomain",
    "AclEngineError",
    "AclStore",
    "CycleDetected",
    "Effect",
    "EffectivePermissions",
    "Explanation",
    "File",
    "Group",
    "GroupAttributed",
    "GroupAttributionChecker",
    "GroupState",
    "GroupedPermissions",
    "InheritedGrant",
    "MutationEngine",
    "MutationResult",
    "Permission",
    "PermissionAggregator",
    "PermissionEngine",
    "PermissionEvaluator",
    "PermissionGroup",
    "PrincipalDirectory",
    "UnknownFile",
    "UnknownPrincipal",
    "User",
    "explanation_text",
]
