"""Error kinds raised by the permission engine.

UnknownPrincipal, UnknownFile, GroupAttributed and InheritedGrant are
recoverable: the consumer reports them and carries on. CycleDetected is a
data-integrity fault and is never recovered inside the engine.
"""

from typing import Sequence


class AclEngineError(Exception):
    """Base class for engine errors."""

    recoverable = True


class UnknownPrincipal(AclEngineError):
    """Raised when a user or group name cannot be resolved."""

    def __init__(self, name: str):
        super().__init__(f"Unknown principal: {name}")
        self.name = name


class UnknownFile(UnknownPrincipal):
    """Raised when a file path cannot be resolved."""

    def __init__(self, path: str):
        AclEngineError.__init__(self, f"Unknown file: {path}")
        self.name = path
        self.path = path


class GroupAttributed(AclEngineError):
    """Raised when removing a permission that is supplied by group membership."""

    def __init__(self, path: str, principal: str, permission, effect, group: str):
        super().__init__(
            f"Cannot remove {effect.value} '{permission.value}' for {principal} on {path}: "
            f"it is granted through group {group}"
        )
        self.path = path
        self.principal = principal
        self.permission = permission
        self.effect = effect
        self.group = group


class InheritedGrant(AclEngineError):
    """Raised when removing a permission that only comes from an ancestor."""

    def __init__(self, path: str, principal: str, permission, effect, source_path: str):
        super().__init__(
            f"Cannot remove {effect.value} '{permission.value}' for {principal} on {path}: "
            f"it is inherited from {source_path}"
        )
        self.path = path
        self.principal = principal
        self.permission = permission
        self.effect = effect
        self.source_path = source_path


class CycleDetected(AclEngineError):
    """Raised when group membership or the file hierarchy loops back on itself."""

    recoverable = False

    def __init__(self, kind: str, chain: Sequence[str]):
        super().__init__(f"{kind} cycle detected: {' -> '.join(chain)}")
        self.kind = kind
        self.chain = tuple(chain)
