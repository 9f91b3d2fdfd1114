"""Tests for the principal directory."""

import pytest

from aclengine.core.directory import Group, PrincipalDirectory, User
from aclengine.core.errors import CycleDetected, UnknownPrincipal


@pytest.fixture
def directory():
    """Directory with a two-level group nesting."""
    directory = PrincipalDirectory()
    directory.add_user("alice")
    directory.add_user("bob")
    directory.add_group("GroupA", ["alice"])
    directory.add_group("Staff", ["GroupA", "bob"])
    directory.add_group("Everyone", ["Staff"])
    return directory


class TestLookup:
    """Test principal resolution."""

    def test_get_user(self, directory):
        """Test resolving a user."""
        assert directory.get("alice") == User("alice")
        assert directory.is_user("alice")
        assert not directory.is_group("alice")

    def test_get_group(self, directory):
        """Test resolving a group."""
        group = directory.get("Staff")
        assert isinstance(group, Group)
        assert group.members == ("GroupA", "bob")
        assert directory.is_group("Staff")

    def test_unknown_principal(self, directory):
        """Test that an unknown name raises UnknownPrincipal."""
        with pytest.raises(UnknownPrincipal) as exc_info:
            directory.get("mallory")
        assert exc_info.value.name == "mallory"
        assert exc_info.value.recoverable

    def test_contains_and_names(self, directory):
        """Test membership of names in the directory."""
        assert "alice" in directory
        assert "mallory" not in directory
        assert directory.names() == ["alice", "bob", "GroupA", "Staff", "Everyone"]

    def test_members_of_user_is_empty(self, directory):
        """Test that users have no members."""
        assert directory.members("alice") == ()

    def test_add_group_drops_duplicate_members(self):
        """Test that duplicate member names keep their first position."""
        directory = PrincipalDirectory()
        group = directory.add_group("G", ["a", "b", "a"])
        assert group.members == ("a", "b")

    def test_add_member(self, directory):
        """Test appending a member to a group."""
        directory.add_user("carol")
        directory.add_member("GroupA", "carol")
        assert directory.members("GroupA") == ("alice", "carol")
        # idempotent
        directory.add_member("GroupA", "carol")
        assert directory.members("GroupA") == ("alice", "carol")

    def test_add_member_to_user_rejected(self, directory):
        """Test that users cannot receive members."""
        with pytest.raises(ValueError):
            directory.add_member("alice", "bob")

    def test_directories_are_independent(self, directory):
        """Test that separate directories share no state."""
        other = PrincipalDirectory()
        assert "alice" not in other
        other.add_user("zed")
        assert "zed" not in directory


class TestMembership:
    """Test nested membership queries."""

    def test_transitive_members(self, directory):
        """Test depth-first expansion of nested groups."""
        assert directory.transitive_members("Everyone") == ("Staff", "GroupA", "alice", "bob")

    def test_groups_containing_nested(self, directory):
        """Test groups containing a user directly and through nesting."""
        assert directory.groups_containing("alice") == ["GroupA", "Staff", "Everyone"]
        assert directory.groups_containing("bob") == ["Staff", "Everyone"]

    def test_groups_containing_group(self, directory):
        """Test groups containing another group."""
        assert directory.groups_containing("GroupA") == ["Staff", "Everyone"]

    def test_is_member(self, directory):
        """Test membership checks."""
        assert directory.is_member("alice", "Everyone")
        assert not directory.is_member("bob", "GroupA")
        assert not directory.is_member("alice", "Nobody")

    def test_unregistered_member_is_leaf(self):
        """Test that unknown member names do not break traversal."""
        directory = PrincipalDirectory()
        directory.add_group("G", ["ghost"])
        assert directory.transitive_members("G") == ("ghost",)
        assert directory.groups_containing("ghost") == ["G"]

    def test_diamond_membership_is_not_a_cycle(self):
        """Test that reaching a group by two paths is allowed."""
        directory = PrincipalDirectory()
        directory.add_user("u")
        directory.add_group("Base", ["u"])
        directory.add_group("Left", ["Base"])
        directory.add_group("Right", ["Base"])
        directory.add_group("Top", ["Left", "Right"])
        directory.validate()
        assert directory.groups_containing("u") == ["Base", "Left", "Right", "Top"]


class TestCycles:
    """Test membership cycle detection."""

    def test_two_group_cycle(self):
        """Test a cycle between two groups."""
        directory = PrincipalDirectory()
        directory.add_group("A", ["B"])
        directory.add_group("B", ["A"])
        with pytest.raises(CycleDetected) as exc_info:
            directory.validate()
        assert exc_info.value.kind == "membership"
        assert exc_info.value.chain == ("A", "B", "A")
        assert not exc_info.value.recoverable

    def test_self_membership(self):
        """Test a group that contains itself."""
        directory = PrincipalDirectory()
        directory.add_group("Loop", ["Loop"])
        with pytest.raises(CycleDetected):
            directory.transitive_members("Loop")

    def test_cycle_surfaces_in_membership_query(self):
        """Test that a cycle anywhere aborts groups_containing."""
        directory = PrincipalDirectory()
        directory.add_user("alice")
        directory.add_group("GroupA", ["alice"])
        directory.add_group("X", ["Y"])
        directory.add_group("Y", ["X"])
        with pytest.raises(CycleDetected):
            directory.groups_containing("alice")


def diamond_chain(levels):
    """Directory where each level L_i reaches L_{i+1} through both A_i and B_i."""
    directory = PrincipalDirectory()
    directory.add_user("alice")
    for i in range(levels):
        directory.add_group(f"L{i}", [f"A{i}", f"B{i}"])
        directory.add_group(f"A{i}", [f"L{i + 1}"])
        directory.add_group(f"B{i}", [f"L{i + 1}"])
    directory.add_group(f"L{levels}", ["alice"])
    return directory


class TestSharedNesting:
    """Test groups reachable through many paths."""

    LEVELS = 40

    def test_transitive_members_of_deep_diamond(self):
        """Test expanding a group whose members share nested groups."""
        directory = diamond_chain(self.LEVELS)
        members = directory.transitive_members("L0")
        assert members[:3] == ("A0", "L1", "A1")
        assert len(members) == 3 * self.LEVELS + 1
        assert "alice" in members
        assert "B0" in members

    def test_groups_containing_in_deep_diamond(self):
        """Test finding every group above a user in a deep diamond."""
        directory = diamond_chain(self.LEVELS)
        groups = directory.groups_containing("alice")
        assert len(groups) == 3 * self.LEVELS + 1
        assert groups[0] == "L0"
        assert directory.is_member("alice", "L0")

    def test_validate_deep_diamond(self):
        """Test that shared nesting is not reported as a cycle."""
        directory = diamond_chain(self.LEVELS)
        directory.validate()

    def test_cycle_below_diamond(self):
        """Test that a cycle behind shared nesting is still found."""
        directory = diamond_chain(self.LEVELS)
        directory.add_member(f"L{self.LEVELS}", "L3")
        with pytest.raises(CycleDetected) as exc_info:
            directory.validate()
        assert exc_info.value.chain[0] == exc_info.value.chain[-1]
