"""Permission evaluator.

Computes effective permissions for a (file, principal) pair. Candidate ACEs
are those on the file and, while inheritance is enabled, on each ancestor up
to the root, whose principal is the subject or any group containing it.

Per permission, deny always overrides allow regardless of where the ACE came
from. A permission with no applicable ACE is absent from both sets, which is
an implicit deny that stays distinguishable from an explicit one.

Every result entry keeps its provenance: the responsible file and ACE, taken
as the first applicable ACE in evaluation order (the file itself, then
ancestors nearest first; ACL order within a file).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

from ..common.logger import get_logger
from .catalog import Effect, Permission
from .directory import PrincipalDirectory
from .store import ACE, AclStore, File, FileRef

logger = get_logger("evaluator")


@dataclass(frozen=True)
class EffectiveEntry:
    """An applicable ACE together with the file it was found on."""

    permission: Permission
    effect: Effect
    file: File
    ace: ACE

    @property
    def principal(self) -> str:
        return self.ace.principal

    @property
    def inherited(self) -> bool:
        return self.ace.inherited


@dataclass
class EffectivePermissions:
    """Effective allow and deny sets, keyed by permission."""

    allow: Dict[Permission, EffectiveEntry] = field(default_factory=dict)
    deny: Dict[Permission, EffectiveEntry] = field(default_factory=dict)

    def for_effect(self, effect: Effect) -> Dict[Permission, EffectiveEntry]:
        return self.allow if effect is Effect.ALLOW else self.deny

    def state_of(self, permission: Permission) -> Optional[Effect]:
        """Effective effect of a permission, or None when unset."""
        if permission in self.deny:
            return Effect.DENY
        if permission in self.allow:
            return Effect.ALLOW
        return None


@dataclass(frozen=True)
class PermissionTrace:
    """Every applicable ACE for one permission, split by effect."""

    permission: Permission
    allow: Tuple[EffectiveEntry, ...] = ()
    deny: Tuple[EffectiveEntry, ...] = ()

    def entries(self, effect: Effect) -> Tuple[EffectiveEntry, ...]:
        return self.allow if effect is Effect.ALLOW else self.deny

    @property
    def decision(self) -> Optional[Effect]:
        if self.deny:
            return Effect.DENY
        if self.allow:
            return Effect.ALLOW
        return None

    @property
    def responsible(self) -> Optional[EffectiveEntry]:
        if self.deny:
            return self.deny[0]
        if self.allow:
            return self.allow[0]
        return None


@dataclass(frozen=True)
class Explanation:
    """Why an action is or is not allowed."""

    is_allowed: bool
    file_responsible: Optional[File] = None
    ace_responsible: Optional[ACE] = None
    text_explanation: Optional[str] = None


class PermissionEvaluator:
    """Answers authorization questions against one directory and store."""

    def __init__(self, directory: PrincipalDirectory, store: AclStore):
        self.directory = directory
        self.store = store

    def subjects(self, principal: str) -> Set[str]:
        """Names whose ACEs apply to a principal: itself and its groups.

        Raises:
            UnknownPrincipal: If the principal is not registered
            CycleDetected: If group membership is cyclic
        """
        self.directory.get(principal)
        return {principal, *self.directory.groups_containing(principal)}

    def evaluation_chain(self, file: FileRef) -> List[File]:
        """Files whose ACEs reach this file, the file itself first.

        Walking up stops at the first file that does not inherit, so a
        folder that blocks inheritance also shields its descendants.

        Raises:
            CycleDetected: If the parent chain loops
        """
        file = self.store.resolve(file)
        ancestors = self.store.ancestors(file)
        chain = [file]
        current = file
        for ancestor in ancestors:
            if not current.inheritance_enabled:
                break
            chain.append(ancestor)
            current = ancestor
        return chain

    def applicable_entries(self, file: FileRef, principal: str) -> List[EffectiveEntry]:
        """All applicable ACEs in evaluation order."""
        file = self.store.resolve(file)
        subjects = self.subjects(principal)
        entries = []
        for source in self.evaluation_chain(file):
            for ace in self.store.snapshot_acl(source):
                if ace.principal not in subjects:
                    continue
                view = ace if source is file else ace.as_inherited()
                entries.append(EffectiveEntry(ace.permission, ace.effect, source, view))
        return entries

    def effective_permissions(self, file: FileRef, principal: str) -> EffectivePermissions:
        """Compute the effective allow and deny sets.

        Args:
            file: File or path
            principal: User (or group) name

        Returns:
            EffectivePermissions with provenance per permission
        """
        allow: Dict[Permission, EffectiveEntry] = {}
        deny: Dict[Permission, EffectiveEntry] = {}
        for entry in self.applicable_entries(file, principal):
            target = deny if entry.effect is Effect.DENY else allow
            target.setdefault(entry.permission, entry)

        # Deny overrides allow
        for permission in deny:
            allow.pop(permission, None)

        logger.debug(
            f"Effective permissions for {principal}: "
            f"{len(allow)} allowed, {len(deny)} denied"
        )
        return EffectivePermissions(allow=allow, deny=deny)

    def is_allowed(self, file: FileRef, principal: str, permission: Union[Permission, str]) -> bool:
        """Check whether an action needing a permission is allowed."""
        permission = Permission.from_string(permission)
        return permission in self.effective_permissions(file, principal).allow

    def trace(self, file: FileRef, principal: str, permission: Union[Permission, str]) -> PermissionTrace:
        """Collect every applicable ACE for a single permission."""
        permission = Permission.from_string(permission)
        allow = []
        deny = []
        for entry in self.applicable_entries(file, principal):
            if entry.permission is not permission:
                continue
            (deny if entry.effect is Effect.DENY else allow).append(entry)
        return PermissionTrace(permission, tuple(allow), tuple(deny))

    def explain(self, file: FileRef, principal: str, permission: Union[Permission, str]) -> Explanation:
        """Explain the decision for one permission."""
        permission = Permission.from_string(permission)
        trace = self.trace(file, principal, permission)
        entry = trace.responsible
        if entry is None:
            return Explanation(
                is_allowed=False,
                text_explanation=f"No permission set for '{permission.value}'",
            )

        source = "inherited from " + entry.file.path if entry.inherited else "set directly"
        if entry.principal != principal:
            source += f", via group {entry.principal}"
        if entry.effect is Effect.DENY:
            text = f"'{permission.value}' is denied ({source})"
            if trace.allow:
                text += "; deny overrides allow"
        else:
            text = f"'{permission.value}' is allowed ({source})"
        return Explanation(
            is_allowed=entry.effect is Effect.ALLOW,
            file_responsible=entry.file,
            ace_responsible=entry.ace,
            text_explanation=text,
        )

    def file_principals(self, file: FileRef) -> List[str]:
        """Principals named by any ACE that reaches a file, in first-seen order."""
        seen: Dict[str, None] = {}
        for source in self.evaluation_chain(file):
            for ace in self.store.snapshot_acl(source):
                seen.setdefault(ace.principal)
        return list(seen)


def explanation_text(explanation: Explanation) -> str:
    """Render an explanation as a short human-readable summary."""
    file_text = explanation.file_responsible.path if explanation.file_responsible else "N/A"
    user_text = explanation.ace_responsible.principal if explanation.ace_responsible else "N/A"
    text = (
        f"Action allowed?: {explanation.is_allowed}; "
        f"Because of permission set for file: {file_text} "
        f"and for user: {user_text}"
    )
    if explanation.text_explanation:
        text += f" ({explanation.text_explanation})"
    return text
