"""Principal directory: users, groups, and nested membership queries."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from ..common.logger import get_logger
from .errors import CycleDetected, UnknownPrincipal

logger = get_logger("directory")


@dataclass(frozen=True)
class User:
    """An atomic principal."""

    name: str


@dataclass(frozen=True)
class Group:
    """A named, ordered set of member principal names (users or groups)."""

    name: str
    members: Tuple[str, ...] = ()


Principal = Union[User, Group]


class PrincipalDirectory:
    """Resolves principal names and answers membership questions.

    Each directory is an independent handle; nothing is shared between
    instances. Members may name principals that are not registered, in
    which case they are treated as leaves.
    """

    def __init__(self, principals: Optional[Iterable[Principal]] = None):
        self._principals: Dict[str, Principal] = {}
        for principal in principals or ():
            self._put(principal)

    def _put(self, principal: Principal) -> Principal:
        if principal.name in self._principals:
            logger.debug(f"Replacing principal: {principal.name}")
        self._principals[principal.name] = principal
        return principal

    def add_user(self, name: str) -> User:
        """Register a user.

        Args:
            name: User name

        Returns:
            The registered User
        """
        return self._put(User(name))

    def add_group(self, name: str, members: Iterable[str] = ()) -> Group:
        """Register a group with its members.

        Duplicate member names keep their first position.

        Args:
            name: Group name
            members: Member principal names, in order

        Returns:
            The registered Group
        """
        return self._put(Group(name, tuple(dict.fromkeys(members))))

    def add_member(self, group_name: str, member: str) -> Group:
        """Append a member to an existing group."""
        group = self.get(group_name)
        if not isinstance(group, Group):
            raise ValueError(f"{group_name} is a user, not a group")
        if member in group.members:
            return group
        return self._put(Group(group.name, group.members + (member,)))

    def get(self, name: str) -> Principal:
        """Look up a principal by name.

        Raises:
            UnknownPrincipal: If the name is not registered
        """
        try:
            return self._principals[name]
        except KeyError:
            raise UnknownPrincipal(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._principals

    def names(self) -> List[str]:
        """Get all principal names in registration order."""
        return list(self._principals)

    def is_user(self, name: str) -> bool:
        return isinstance(self.get(name), User)

    def is_group(self, name: str) -> bool:
        return isinstance(self.get(name), Group)

    def members(self, name: str) -> Tuple[str, ...]:
        """Get the direct members of a group (empty for a user)."""
        principal = self.get(name)
        if isinstance(principal, Group):
            return principal.members
        return ()

    def transitive_members(self, name: str) -> Tuple[str, ...]:
        """Get every principal reachable through a group's membership.

        Order is depth-first in member order, each name once.

        Raises:
            CycleDetected: If the membership graph loops back on itself
        """
        found: Dict[str, None] = {}
        self._walk(name, [], set(), set(), found)
        return tuple(found)

    def _walk(
        self,
        name: str,
        path: List[str],
        on_path: Set[str],
        explored: Set[str],
        found: Dict[str, None],
    ) -> None:
        if name in on_path:
            raise CycleDetected("membership", path[path.index(name):] + [name])
        # Everything below an explored group is already in found
        if name in explored:
            return
        principal = self._principals.get(name)
        if not isinstance(principal, Group):
            return
        path.append(name)
        on_path.add(name)
        for member in principal.members:
            found.setdefault(member)
            self._walk(member, path, on_path, explored, found)
        path.pop()
        on_path.discard(name)
        explored.add(name)

    def _containers(self) -> Dict[str, List[str]]:
        """Reverse membership index: member name to the groups listing it."""
        index: Dict[str, List[str]] = {}
        for principal in self._principals.values():
            if isinstance(principal, Group):
                for member in principal.members:
                    index.setdefault(member, []).append(principal.name)
        return index

    def groups_containing(self, name: str) -> List[str]:
        """Get every group that contains a principal, directly or nested.

        Groups are returned in registration order. The whole membership graph
        is checked first, so any cycle in the directory is reported.

        Raises:
            CycleDetected: If the membership graph loops back on itself
        """
        self.validate()
        index = self._containers()
        reached: Set[str] = set()
        pending = [name]
        while pending:
            for group_name in index.get(pending.pop(), ()):
                if group_name not in reached:
                    reached.add(group_name)
                    pending.append(group_name)
        return [n for n in self._principals if n in reached]

    def is_member(self, name: str, group_name: str) -> bool:
        """Check whether a principal belongs to a group, directly or nested."""
        if group_name not in self._principals:
            return False
        return name in self.transitive_members(group_name)

    def validate(self) -> None:
        """Check the whole membership graph for cycles.

        Each group is expanded once, so the check is linear in the size of
        the graph.

        Raises:
            CycleDetected: On the first cycle found
        """
        explored: Set[str] = set()
        for principal in self._principals.values():
            if isinstance(principal, Group):
                self._walk(principal.name, [], set(), explored, {})
