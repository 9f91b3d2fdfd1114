"""Pytest configuration and shared fixtures."""

import pytest

from aclengine.core import (
    ACE,
    AclDomain,
    Effect,
    Permission,
    PermissionEngine,
)


@pytest.fixture
def sample_config():
    """Sample configuration dictionary."""
    return {
        "logging": {
            "level": "DEBUG",
            "log_dir": "/tmp/aclengine-logs",
            "file_logging": False,
        },
        "policy": {
            "protect_inherited": False,
        },
        "domain": {
            "principals": {
                "alice": None,
                "bob": {},
                "GroupA": {"members": ["alice"]},
                "Staff": {"members": ["GroupA", "bob"]},
            },
            "files": [
                {
                    "path": "/docs",
                    "acl": [
                        {"principal": "GroupA", "permission": "List folder/read data", "effect": "allow"},
                        {"principal": "bob", "permission": "WRITE_DATA", "effect": "deny"},
                    ],
                },
                {"path": "/docs/sub", "parent": "/docs"},
            ],
        },
    }


@pytest.fixture
def domain():
    """Domain with nested groups and a three-level file tree.

    Principals: alice, bob, carol; GroupA = [alice]; Staff = [GroupA, bob].
    Files: /docs -> /docs/sub -> /docs/sub/deep, and /docs/private which
    does not inherit.
    """
    domain = AclDomain()
    directory = domain.directory
    directory.add_user("alice")
    directory.add_user("bob")
    directory.add_user("carol")
    directory.add_group("GroupA", ["alice"])
    directory.add_group("Staff", ["GroupA", "bob"])

    store = domain.store
    store.add_file(
        "/docs",
        acl=[ACE("GroupA", Permission.READ_DATA, Effect.ALLOW)],
    )
    store.add_file("/docs/sub", parent="/docs")
    store.add_file("/docs/sub/deep", parent="/docs/sub")
    store.add_file("/docs/private", parent="/docs", inheritance_enabled=False)
    return domain


@pytest.fixture
def engine(domain):
    """PermissionEngine over the shared domain fixture."""
    return PermissionEngine(domain)


@pytest.fixture
def docs(domain):
    """The /docs file."""
    return domain.store.get_file("/docs")
