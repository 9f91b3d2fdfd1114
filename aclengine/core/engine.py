"""Engine entry points.

An AclDomain bundles one principal directory and one ACL store; domains are
independent handles, so several can coexist in one process. PermissionEngine
wires the evaluator, aggregator, attribution checker and mutation engine
over a domain and exposes the operations a permission editor calls.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..common.config import AclEngineConfig, PolicyConfig
from ..common.logger import get_logger
from .aggregator import FileGrant, GroupedPermissions, PermissionAggregator
from .attribution import GroupAttributionChecker
from .catalog import Effect, Permission, PermissionGroup
from .directory import PrincipalDirectory
from .evaluator import EffectivePermissions, Explanation, PermissionEvaluator
from .mutation import MutationEngine, MutationResult
from .store import ACE, AclStore, FileRef

logger = get_logger("engine")


@dataclass
class AclDomain:
    """Principals and files of one independent ACL domain."""

    directory: PrincipalDirectory = field(default_factory=PrincipalDirectory)
    store: AclStore = field(default_factory=AclStore)

    @classmethod
    def from_config(cls, config: AclEngineConfig) -> "AclDomain":
        """Build a domain from the ``domain`` section of a configuration.

        Files must be listed after their parents.

        Raises:
            ValueError: On an unknown permission or effect name
            UnknownFile: If a parent path is not defined earlier
            CycleDetected: If group membership is cyclic
        """
        domain = cls()
        for principal in config.principals:
            if principal.is_group:
                domain.directory.add_group(principal.name, principal.members)
            else:
                domain.directory.add_user(principal.name)
        domain.directory.validate()

        for file_config in config.files:
            acl = [
                ACE(
                    principal=ace.principal,
                    permission=Permission.from_string(ace.permission),
                    effect=Effect.from_string(ace.effect),
                )
                for ace in file_config.acl
            ]
            domain.store.add_file(
                file_config.path,
                parent=file_config.parent,
                inheritance_enabled=file_config.inheritance,
                acl=acl,
            )
        logger.info(
            f"Loaded domain with {len(domain.directory.names())} principals "
            f"and {len(domain.store.paths())} files"
        )
        return domain


class PermissionEngine:
    """Evaluation and mutation operations over one AclDomain."""

    def __init__(self, domain: AclDomain, policy: Optional[PolicyConfig] = None):
        self.domain = domain
        self.policy = policy or PolicyConfig()
        self.evaluator = PermissionEvaluator(domain.directory, domain.store)
        self.aggregator = PermissionAggregator(self.evaluator)
        self.attribution = GroupAttributionChecker(self.evaluator)
        self.mutations = MutationEngine(
            domain.store,
            self.evaluator,
            self.attribution,
            protect_inherited=self.policy.protect_inherited,
        )

    @classmethod
    def from_config(cls, config: AclEngineConfig) -> "PermissionEngine":
        return cls(AclDomain.from_config(config), config.policy)

    # Evaluation

    def effective_permissions(self, file: FileRef, user: str) -> EffectivePermissions:
        return self.evaluator.effective_permissions(file, user)

    def is_allowed(self, file: FileRef, user: str, permission: Union[Permission, str]) -> bool:
        return self.evaluator.is_allowed(file, user, Permission.from_string(permission))

    def explain(self, file: FileRef, user: str, permission: Union[Permission, str]) -> Explanation:
        return self.evaluator.explain(file, user, Permission.from_string(permission))

    def grouped_permissions(self, file: FileRef, user: str) -> GroupedPermissions:
        return self.aggregator.grouped_permissions(file, user)

    def file_principals(self, file: FileRef) -> List[str]:
        return self.evaluator.file_principals(file)

    def file_permission_listing(self, file: FileRef) -> List[FileGrant]:
        return self.aggregator.file_permission_listing(file)

    def attributed_group(
        self,
        file: FileRef,
        user: str,
        permission: Union[Permission, str],
        effect: Union[Effect, str],
    ) -> Optional[str]:
        return self.attribution.attributed_group(
            file, user, Permission.from_string(permission), Effect.from_string(effect)
        )

    # Mutation

    def set_permission(
        self,
        file: FileRef,
        user: str,
        permission: Union[Permission, str],
        effect: Union[Effect, str],
        present: bool,
    ) -> MutationResult:
        return self.mutations.set_permission(file, user, permission, effect, present)

    def set_permission_group(
        self,
        file: FileRef,
        user: str,
        group: Union[PermissionGroup, str],
        effect: Union[Effect, str],
        present: bool,
    ) -> MutationResult:
        return self.mutations.set_permission_group(file, user, group, effect, present)
