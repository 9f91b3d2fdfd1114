"""Mutation engine: applies and retracts grants on a file's direct ACL.

Policy:
  - Removing a permission supplied only through group membership raises
    GroupAttributed; nothing on the user's own entries could change it.
  - Adding a deny first drops the user's direct allow for the same permission.
  - Group edits expand to their distinguishing permissions (Read_Execute
    touches traverse/execute only) and are all-or-nothing.
  - Inherited ACEs are never modified.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from ..common.logger import get_logger
from .attribution import GroupAttributionChecker
from .catalog import Effect, Permission, PermissionGroup, distinguishing_permissions
from .errors import GroupAttributed, InheritedGrant
from .evaluator import PermissionEvaluator
from .store import ACE, AclStore, File, FileRef

logger = get_logger("mutation")


@dataclass(frozen=True)
class MutationResult:
    """ACEs added to and removed from a file's direct ACL by one call."""

    added: Tuple[ACE, ...] = ()
    removed: Tuple[ACE, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class MutationEngine:
    """Edits direct ACLs for (file, principal) pairs."""

    def __init__(
        self,
        store: AclStore,
        evaluator: PermissionEvaluator,
        attribution: GroupAttributionChecker,
        *,
        protect_inherited: bool = False,
    ):
        """
        Initialize the engine.

        Args:
            store: Store holding the files to edit
            evaluator: Evaluator over the same store
            attribution: Attribution checker over the same evaluator
            protect_inherited: Refuse removals whose only support is inherited
        """
        self.store = store
        self.evaluator = evaluator
        self.attribution = attribution
        self.protect_inherited = protect_inherited

    def set_permission(
        self,
        file: FileRef,
        principal: str,
        permission: Union[Permission, str],
        effect: Union[Effect, str],
        present: bool,
    ) -> MutationResult:
        """Add or remove a single direct grant.

        Args:
            file: File or path
            principal: User (or group) name
            permission: Permission to set
            effect: Allow or deny
            present: True to add the grant, False to remove it

        Returns:
            MutationResult describing the change (empty when already in that state)

        Raises:
            UnknownPrincipal: If the file or principal cannot be resolved
            GroupAttributed: If removing a grant that comes from a group
            InheritedGrant: If removing an inherited grant while protect_inherited is set
        """
        return self._apply(
            file,
            principal,
            (Permission.from_string(permission),),
            Effect.from_string(effect),
            present,
        )

    def set_permission_group(
        self,
        file: FileRef,
        principal: str,
        group: Union[PermissionGroup, str],
        effect: Union[Effect, str],
        present: bool,
    ) -> MutationResult:
        """Add or remove every grant of a permission group at once.

        Raises:
            ValueError: For Special_permissions, which has no expansion
            UnknownPrincipal: If the file or principal cannot be resolved
            GroupAttributed: If any removed grant comes from a group
            InheritedGrant: If any removed grant is inherited while protect_inherited is set
        """
        group = PermissionGroup.from_string(group)
        if group is PermissionGroup.SPECIAL_PERMISSIONS:
            raise ValueError("Special_permissions cannot be set as a group")
        return self._apply(
            file,
            principal,
            distinguishing_permissions(group),
            Effect.from_string(effect),
            present,
        )

    def _apply(
        self,
        file: FileRef,
        principal: str,
        permissions: Sequence[Permission],
        effect: Effect,
        present: bool,
    ) -> MutationResult:
        file = self.store.resolve(file)
        self.evaluator.directory.get(principal)

        with self.store.lock_for(file):
            if not present:
                for permission in permissions:
                    self._check_removal(file, principal, permission, effect)

            new_acl, added, removed = self._plan(
                file.direct_acl, principal, permissions, effect, present
            )
            if added or removed:
                file.direct_acl[:] = new_acl

        result = MutationResult(tuple(added), tuple(removed))
        if result.changed:
            logger.info(
                f"{'Set' if present else 'Cleared'} {effect.value} for {principal} on {file.path}: "
                f"+{len(added)} -{len(removed)} ACEs"
            )
        else:
            logger.debug(f"No change for {principal} on {file.path}")
        return result

    def _check_removal(
        self, file: File, principal: str, permission: Permission, effect: Effect
    ) -> None:
        group = self.attribution.attributed_group(file, principal, permission, effect)
        if group is not None:
            logger.warning(
                f"Refusing to remove {effect.value} '{permission.value}' for {principal} "
                f"on {file.path}: granted through group {group}"
            )
            raise GroupAttributed(file.path, principal, permission, effect, group)

        if not self.protect_inherited:
            return
        own = [
            e for e in self.evaluator.trace(file, principal, permission).entries(effect)
            if e.principal == principal
        ]
        if own and all(e.inherited for e in own):
            logger.warning(
                f"Refusing to remove {effect.value} '{permission.value}' for {principal} "
                f"on {file.path}: inherited from {own[0].file.path}"
            )
            raise InheritedGrant(file.path, principal, permission, effect, own[0].file.path)

    @staticmethod
    def _plan(
        acl: Iterable[ACE],
        principal: str,
        permissions: Sequence[Permission],
        effect: Effect,
        present: bool,
    ) -> Tuple[List[ACE], List[ACE], List[ACE]]:
        new_acl = list(acl)
        added: List[ACE] = []
        removed: List[ACE] = []

        def drop(key) -> None:
            for ace in list(new_acl):
                if not ace.inherited and ace.key == key:
                    new_acl.remove(ace)
                    removed.append(ace)

        for permission in permissions:
            key = (principal, permission, effect)
            if not present:
                drop(key)
                continue
            if effect is Effect.DENY:
                drop((principal, permission, Effect.ALLOW))
            if not any(not ace.inherited and ace.key == key for ace in new_acl):
                ace = ACE(principal, permission, effect)
                new_acl.append(ace)
                added.append(ace)
        return new_acl, added, removed
