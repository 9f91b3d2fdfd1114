"""Permission aggregator.

Maps an effective permission set onto permission groups, giving each group a
granted / partial / absent state per effect.

Expandable groups are judged by their distinguishing permissions (Read_Execute
by traverse/execute alone). Full_control and Special_permissions are never
judged by member permissions: Full_control is granted only when the whole
catalog is present, and Special_permissions is granted when permissions
outside every expandable group are present and Full_control is not.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..common.logger import get_logger
from .catalog import (
    Effect,
    Permission,
    PermissionGroup,
    all_permissions,
    distinguishing_permissions,
    expandable_groups,
    ungrouped_permissions,
)
from .evaluator import EffectiveEntry, EffectivePermissions, PermissionEvaluator
from .store import FileRef

logger = get_logger("aggregator")


class GroupState(str, Enum):
    """Aggregate state of a permission group for one effect."""

    GRANTED = "granted"
    PARTIAL = "partial"
    ABSENT = "absent"


@dataclass(frozen=True)
class GroupStatus:
    """State of one group, with provenance when granted."""

    state: GroupState
    provenance: Optional[EffectiveEntry] = None
    inherited: bool = False

    @property
    def granted(self) -> bool:
        return self.state is GroupState.GRANTED


ABSENT = GroupStatus(GroupState.ABSENT)


@dataclass
class GroupedPermissions:
    """Group states per effect; every group is present as a key."""

    allow: Dict[PermissionGroup, GroupStatus] = field(default_factory=dict)
    deny: Dict[PermissionGroup, GroupStatus] = field(default_factory=dict)

    def for_effect(self, effect: Effect) -> Dict[PermissionGroup, GroupStatus]:
        return self.allow if effect is Effect.ALLOW else self.deny

    def granted(self, effect: Effect) -> List[PermissionGroup]:
        """Groups fully granted for an effect, in display order."""
        return [g for g, status in self.for_effect(effect).items() if status.granted]


@dataclass(frozen=True)
class FileGrant:
    """One row of a file's permission listing."""

    effect: Effect
    principal: str
    group: PermissionGroup
    inherited: bool


def _status_from(entries: List[EffectiveEntry], total: int) -> GroupStatus:
    if not entries:
        return ABSENT
    if len(entries) < total:
        return GroupStatus(GroupState.PARTIAL)
    return GroupStatus(
        GroupState.GRANTED,
        provenance=entries[0],
        inherited=all(e.inherited for e in entries),
    )


def aggregate(effective: Dict[Permission, EffectiveEntry]) -> Dict[PermissionGroup, GroupStatus]:
    """Aggregate one effect's permission set into group states.

    Args:
        effective: Effective entries for a single effect

    Returns:
        Mapping of every group to its status, in display order
    """
    result: Dict[PermissionGroup, GroupStatus] = {}

    catalog = all_permissions()
    full = [effective[p] for p in catalog if p in effective]
    full_control = _status_from(full, len(catalog)) if len(full) == len(catalog) else ABSENT

    for group in PermissionGroup:
        if group in expandable_groups():
            members = distinguishing_permissions(group)
            present = [effective[p] for p in members if p in effective]
            result[group] = _status_from(present, len(members))
        elif group is PermissionGroup.FULL_CONTROL:
            result[group] = full_control
        else:  # Special_permissions
            extra = [effective[p] for p in ungrouped_permissions() if p in effective]
            if extra and not full_control.granted:
                result[group] = GroupStatus(
                    GroupState.GRANTED,
                    provenance=extra[0],
                    inherited=all(e.inherited for e in extra),
                )
            else:
                result[group] = ABSENT
    return result


class PermissionAggregator:
    """Groups effective permissions for display and editing."""

    def __init__(self, evaluator: PermissionEvaluator):
        self.evaluator = evaluator

    def group_effective(self, effective: EffectivePermissions) -> GroupedPermissions:
        """Aggregate an already computed effective permission set."""
        return GroupedPermissions(
            allow=aggregate(effective.allow),
            deny=aggregate(effective.deny),
        )

    def grouped_permissions(self, file: FileRef, principal: str) -> GroupedPermissions:
        """Compute group states for a (file, principal) pair.

        Args:
            file: File or path
            principal: User (or group) name

        Returns:
            GroupedPermissions for both effects
        """
        effective = self.evaluator.effective_permissions(file, principal)
        grouped = self.group_effective(effective)
        logger.debug(
            f"Grouped permissions for {principal}: "
            f"allow={[g.value for g in grouped.granted(Effect.ALLOW)]} "
            f"deny={[g.value for g in grouped.granted(Effect.DENY)]}"
        )
        return grouped

    def file_permission_listing(self, file: FileRef) -> List[FileGrant]:
        """List the granted groups of every principal that has ACEs on a file."""
        rows = []
        for principal in self.evaluator.file_principals(file):
            if principal not in self.evaluator.directory:
                logger.warning(f"Skipping unregistered principal in ACL: {principal}")
                continue
            grouped = self.grouped_permissions(file, principal)
            for effect in Effect:
                for group, status in grouped.for_effect(effect).items():
                    if status.granted:
                        rows.append(FileGrant(effect, principal, group, status.inherited))
        return rows

