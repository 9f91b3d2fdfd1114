"""End-to-end permission editing scenarios over a configured domain."""

import pytest

from aclengine import AclDomain, Effect, Permission, PermissionEngine, PermissionGroup
from aclengine.common.config import parse_config
from aclengine.core import CycleDetected, GroupAttributed, GroupState, UnknownFile, explanation_text


@pytest.fixture
def configured_engine(sample_config):
    return PermissionEngine.from_config(parse_config(sample_config))


class TestDomainFromConfig:
    """Tests for building a domain from configuration."""

    def test_principals_and_files(self, sample_config):
        """Test that principals and files are registered."""
        domain = AclDomain.from_config(parse_config(sample_config))

        assert domain.directory.is_group("Staff")
        assert domain.directory.is_user("alice")
        assert domain.directory.transitive_members("Staff") == ("GroupA", "alice", "bob")
        assert domain.store.get_file("/docs/sub").parent is domain.store.get_file("/docs")

    def test_acl_names_are_parsed(self, sample_config):
        """Test that display and member names both parse."""
        domain = AclDomain.from_config(parse_config(sample_config))
        keys = [ace.key for ace in domain.store.get_file("/docs").direct_acl]

        assert ("GroupA", Permission.READ_DATA, Effect.ALLOW) in keys
        assert ("bob", Permission.WRITE_DATA, Effect.DENY) in keys

    def test_cyclic_membership_rejected(self, sample_config):
        """Test that a cyclic group graph fails at load time."""
        sample_config["domain"]["principals"]["GroupA"]["members"].append("Staff")

        with pytest.raises(CycleDetected):
            AclDomain.from_config(parse_config(sample_config))

    def test_unknown_parent_rejected(self, sample_config):
        """Test that a parent must be defined first."""
        sample_config["domain"]["files"].append({"path": "/x", "parent": "/missing"})

        with pytest.raises(UnknownFile):
            AclDomain.from_config(parse_config(sample_config))

    def test_invalid_permission_rejected(self, sample_config):
        """Test that an unknown permission name fails at load time."""
        sample_config["domain"]["files"][0]["acl"].append(
            {"principal": "bob", "permission": "Fly"}
        )

        with pytest.raises(ValueError):
            AclDomain.from_config(parse_config(sample_config))

    def test_domains_are_independent(self, sample_config):
        """Test that edits in one domain do not leak into another."""
        first = PermissionEngine.from_config(parse_config(sample_config))
        second = PermissionEngine.from_config(parse_config(sample_config))
        first.set_permission("/docs", "bob", Permission.DELETE, Effect.ALLOW, True)

        assert first.is_allowed("/docs", "bob", Permission.DELETE)
        assert not second.is_allowed("/docs", "bob", Permission.DELETE)


class TestEditorScenarios:
    """Scenarios an ACL editor walks through."""

    def test_group_member_sees_group_grant(self, configured_engine):
        """Test alice reading /docs through GroupA."""
        explanation = configured_engine.explain("/docs", "alice", Permission.READ_DATA)

        assert explanation.is_allowed
        assert explanation.ace_responsible.principal == "GroupA"
        assert explanation_text(explanation).startswith(
            "Action allowed?: True; Because of permission set for file: /docs and for user: GroupA"
        )

    def test_group_grant_cannot_be_removed_from_user(self, configured_engine):
        """Test that the editor refuses to strip a group grant from alice."""
        with pytest.raises(GroupAttributed):
            configured_engine.set_permission("/docs", "alice", Permission.READ_DATA, Effect.ALLOW, False)

        assert configured_engine.is_allowed("/docs", "alice", Permission.READ_DATA)

    def test_removing_from_group_revokes_member(self, configured_engine):
        """Test that clearing the group's ACE revokes alice's access."""
        configured_engine.set_permission("/docs", "GroupA", Permission.READ_DATA, Effect.ALLOW, False)

        assert not configured_engine.is_allowed("/docs", "alice", Permission.READ_DATA)
        assert not configured_engine.is_allowed("/docs/sub", "alice", Permission.READ_DATA)

    def test_child_inherits_and_overrides(self, configured_engine):
        """Test a deny on the child overriding the inherited allow."""
        assert configured_engine.is_allowed("/docs/sub", "alice", "READ_DATA")

        configured_engine.set_permission("/docs/sub", "alice", Permission.READ_DATA, Effect.DENY, True)

        assert not configured_engine.is_allowed("/docs/sub", "alice", Permission.READ_DATA)
        assert configured_engine.is_allowed("/docs", "alice", Permission.READ_DATA)
        deny = configured_engine.effective_permissions("/docs/sub", "alice").deny[Permission.READ_DATA]
        assert not deny.inherited

    def test_inherited_deny_from_config(self, configured_engine):
        """Test bob's write deny reaching the child folder."""
        entry = configured_engine.effective_permissions("/docs/sub", "bob").deny[Permission.WRITE_DATA]

        assert entry.inherited
        assert entry.file.path == "/docs"
        grouped = configured_engine.grouped_permissions("/docs/sub", "bob")
        assert grouped.deny[PermissionGroup.WRITE].state is GroupState.PARTIAL

    def test_group_toggle_round(self, configured_engine):
        """Test granting and clearing a group for a user."""
        configured_engine.set_permission_group("/docs", "bob", PermissionGroup.READ, Effect.ALLOW, True)
        assert configured_engine.grouped_permissions("/docs/sub", "bob").allow[PermissionGroup.READ].granted

        configured_engine.set_permission_group("/docs", "bob", PermissionGroup.READ, Effect.ALLOW, False)
        grouped = configured_engine.grouped_permissions("/docs", "bob")
        assert grouped.allow[PermissionGroup.READ].state is GroupState.ABSENT

    def test_file_permission_listing(self, configured_engine):
        """Test the per-file listing an editor shows."""
        configured_engine.set_permission_group("/docs", "GroupA", PermissionGroup.READ, Effect.ALLOW, True)
        rows = configured_engine.file_permission_listing("/docs/sub")
        summary = [(r.effect, r.principal, r.group, r.inherited) for r in rows]

        assert summary == [(Effect.ALLOW, "GroupA", PermissionGroup.READ, True)]
        assert configured_engine.file_principals("/docs/sub") == ["GroupA", "bob"]
