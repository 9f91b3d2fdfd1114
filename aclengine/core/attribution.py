"""Group-attribution checker.

Decides whether a permission's grant (or denial) for a user is supplied only
by a group the user belongs to. Such a permission cannot be removed by
editing the user's own entries, so the mutation engine refuses to try.
"""

from enum import Enum
from typing import Optional, Union

from .catalog import Effect, Permission
from .evaluator import PermissionEvaluator
from .store import FileRef


class Attribution(str, Enum):
    """Where the effect of a permission comes from."""

    DIRECT = "direct"
    GROUP = "group"
    UNSET = "unset"


class GroupAttributionChecker:
    """Looks at a permission's provenance chain for one effect."""

    def __init__(self, evaluator: PermissionEvaluator):
        self.evaluator = evaluator

    def classify(
        self,
        file: FileRef,
        principal: str,
        permission: Union[Permission, str],
        effect: Union[Effect, str],
    ) -> Attribution:
        """Classify the source of an effect as direct, group or unset."""
        entries = self.evaluator.trace(file, principal, permission).entries(Effect.from_string(effect))
        if not entries:
            return Attribution.UNSET
        if any(e.principal == principal for e in entries):
            return Attribution.DIRECT
        return Attribution.GROUP

    def attributed_group(
        self,
        file: FileRef,
        principal: str,
        permission: Union[Permission, str],
        effect: Union[Effect, str],
    ) -> Optional[str]:
        """Get the group that alone supplies an effect, if any.

        Args:
            file: File or path
            principal: User name
            permission: Permission to inspect
            effect: Allow or deny

        Returns:
            Name of the first group whose ACE supplies the effect when no ACE
            names the principal directly; None when the effect is direct or unset
        """
        entries = self.evaluator.trace(file, principal, permission).entries(Effect.from_string(effect))
        if not entries or any(e.principal == principal for e in entries):
            return None
        return entries[0].principal
