"""Permission catalog for the ACL engine.

Defines the fine-grained NTFS-style permissions, the named permission
groups shown in a simplified editor, and the group expansion table.

Group expansion:
  - Read          = read data + read attributes + read extended attributes + read permissions
  - Write         = write data + append data + write attributes + write extended attributes
  - Read_Execute  = Read + traverse/execute
  - Modify        = Read_Execute + Write + delete
  - Full_control  = every permission
  - Special_permissions has no expansion
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class Permission(str, Enum):
    """Fine-grained permissions that an ACE can grant or deny."""

    TRAVERSE_EXECUTE = "Traverse folder/execute file"
    READ_DATA = "List folder/read data"
    READ_ATTRIBUTES = "Read attributes"
    READ_EXTENDED_ATTRIBUTES = "Read extended attributes"
    WRITE_DATA = "Create files/write data"
    APPEND_DATA = "Create folders/append data"
    WRITE_ATTRIBUTES = "Write attributes"
    WRITE_EXTENDED_ATTRIBUTES = "Write extended attributes"
    DELETE_SUBFOLDERS = "Delete subfolders and files"
    DELETE = "Delete"
    READ_PERMISSIONS = "Read permissions"
    CHANGE_PERMISSIONS = "Change permissions"
    TAKE_OWNERSHIP = "Take ownership"

    @classmethod
    def from_string(cls, text: str) -> "Permission":
        """Parse a permission from its display name or member name."""
        return _parse_enum(cls, text, "permission")


class PermissionGroup(str, Enum):
    """Named bundles of permissions, in display order."""

    FULL_CONTROL = "Full_control"
    MODIFY = "Modify"
    READ_EXECUTE = "Read_Execute"
    READ = "Read"
    WRITE = "Write"
    SPECIAL_PERMISSIONS = "Special_permissions"

    @classmethod
    def from_string(cls, text: str) -> "PermissionGroup":
        """Parse a group from its value ("Read_Execute") or member name."""
        return _parse_enum(cls, text, "permission group")

    @property
    def label(self) -> str:
        """Label shown in an editor."""
        return GROUP_LABELS[self]


class Effect(str, Enum):
    """ACE effect."""

    ALLOW = "allow"
    DENY = "deny"

    @classmethod
    def from_string(cls, text: str) -> "Effect":
        return _parse_enum(cls, text, "effect")


def _parse_enum(enum_cls, text, kind: str):
    if isinstance(text, enum_cls):
        return text
    for member in enum_cls:
        if text == member.value or str(text).upper() == member.name:
            return member
    raise ValueError(f"Invalid {kind}: {text}")


_READ = (
    Permission.READ_DATA,
    Permission.READ_ATTRIBUTES,
    Permission.READ_EXTENDED_ATTRIBUTES,
    Permission.READ_PERMISSIONS,
)

_WRITE = (
    Permission.WRITE_DATA,
    Permission.APPEND_DATA,
    Permission.WRITE_ATTRIBUTES,
    Permission.WRITE_EXTENDED_ATTRIBUTES,
)

_READ_EXECUTE = _READ + (Permission.TRAVERSE_EXECUTE,)

GROUP_EXPANSION: Mapping[PermissionGroup, Tuple[Permission, ...]] = MappingProxyType({
    PermissionGroup.FULL_CONTROL: tuple(Permission),
    PermissionGroup.MODIFY: _READ_EXECUTE + _WRITE + (Permission.DELETE,),
    PermissionGroup.READ_EXECUTE: _READ_EXECUTE,
    PermissionGroup.READ: _READ,
    PermissionGroup.WRITE: _WRITE,
    PermissionGroup.SPECIAL_PERMISSIONS: (),
})

# Read_Execute overlaps Read; only its own permission is shown and edited.
DISTINGUISHING_PERMISSIONS: Mapping[PermissionGroup, Tuple[Permission, ...]] = MappingProxyType({
    group: (Permission.TRAVERSE_EXECUTE,) if group is PermissionGroup.READ_EXECUTE else perms
    for group, perms in GROUP_EXPANSION.items()
})

GROUP_LABELS: Mapping[PermissionGroup, str] = MappingProxyType({
    PermissionGroup.FULL_CONTROL: "Full control",
    PermissionGroup.MODIFY: "Modify",
    PermissionGroup.READ_EXECUTE: "Execute",
    PermissionGroup.READ: "Read",
    PermissionGroup.WRITE: "Write",
    PermissionGroup.SPECIAL_PERMISSIONS: "Special permissions",
})

# Groups whose state is derived from their member permissions
EXPANDABLE_GROUPS: Tuple[PermissionGroup, ...] = (
    PermissionGroup.MODIFY,
    PermissionGroup.READ_EXECUTE,
    PermissionGroup.READ,
    PermissionGroup.WRITE,
)

UNGROUPED_PERMISSIONS: Tuple[Permission, ...] = tuple(
    p for p in Permission
    if not any(p in GROUP_EXPANSION[g] for g in EXPANDABLE_GROUPS)
)


def all_permissions() -> Tuple[Permission, ...]:
    """Get every permission in catalog order."""
    return tuple(Permission)


def expand_group(group: PermissionGroup) -> Tuple[Permission, ...]:
    """Get the full set of permissions bundled by a group."""
    return GROUP_EXPANSION[group]


def distinguishing_permissions(group: PermissionGroup) -> Tuple[Permission, ...]:
    """Get the permissions that decide a group's state and receive its edits.

    Identical to the expansion except for Read_Execute, which is reduced to
    traverse/execute so it never repeats what the Read group shows.
    """
    return DISTINGUISHING_PERMISSIONS[group]


def expandable_groups() -> Tuple[PermissionGroup, ...]:
    """Get groups whose state is computed from their members."""
    return EXPANDABLE_GROUPS


def ungrouped_permissions() -> Tuple[Permission, ...]:
    """Get permissions that no expandable group covers."""
    return UNGROUPED_PERMISSIONS
