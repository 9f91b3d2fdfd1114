"""Configuration management for aclengine.

Handles loading and validation of YAML configuration files. A configuration
carries logging options, the mutation policy, and an optional ``domain``
section that seeds principals and files for an isolated ACL domain.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


DEFAULT_CONFIG_PATH = "aclengine.yaml"

TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0", "")


@dataclass
class LoggingConfig:
    """Configuration for engine logging."""

    level: str = "INFO"
    log_dir: str = "logs"
    file_logging: bool = False
    console_logging: bool = True


@dataclass
class PolicyConfig:
    """Mutation policy switches."""

    # Refuse removals whose only support is an ACE inherited from an ancestor
    protect_inherited: bool = False


@dataclass
class PrincipalConfig:
    """A user, or a group with its member names."""

    name: str
    members: Optional[List[str]] = None

    @property
    def is_group(self) -> bool:
        return self.members is not None


@dataclass
class AceConfig:
    """A single access control entry as written in the config file."""

    principal: str
    permission: str
    effect: str = "allow"


@dataclass
class FileConfig:
    """A file or folder with its direct ACL."""

    path: str
    parent: Optional[str] = None
    inheritance: bool = True
    acl: List[AceConfig] = field(default_factory=list)


@dataclass
class AclEngineConfig:
    """Top-level configuration for aclengine."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    principals: List[PrincipalConfig] = field(default_factory=list)
    files: List[FileConfig] = field(default_factory=list)


def parse_bool(value: Any) -> bool:
    """Parse a boolean option.

    Strings come from environment expansion, so "false" must not read as
    true.

    Args:
        value: bool, int or string value

    Returns:
        Parsed boolean

    Raises:
        ValueError: If a string is not a recognized boolean
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        raise ValueError(f"Invalid boolean value: {value}")
    return bool(value)


def parse_logging_config(logging_dict: Dict[str, Any]) -> LoggingConfig:
    """Parse logging configuration dictionary.

    Args:
        logging_dict: Logging configuration dictionary

    Returns:
        LoggingConfig instance
    """
    return LoggingConfig(
        level=logging_dict.get("level", "INFO"),
        log_dir=logging_dict.get("log_dir", "logs"),
        file_logging=parse_bool(logging_dict.get("file_logging", False)),
        console_logging=parse_bool(logging_dict.get("console_logging", True)),
    )


def parse_policy_config(policy_dict: Dict[str, Any]) -> PolicyConfig:
    """Parse policy configuration dictionary.

    Args:
        policy_dict: Policy configuration dictionary

    Returns:
        PolicyConfig instance
    """
    return PolicyConfig(
        protect_inherited=parse_bool(policy_dict.get("protect_inherited", False)),
    )


def parse_principal_config(name: str, principal_dict: Optional[Dict[str, Any]]) -> PrincipalConfig:
    """Parse one principal entry.

    A principal with a ``members`` key (even an empty list) is a group;
    anything else is a user.

    Args:
        name: Principal name
        principal_dict: Principal options, or None for a bare user

    Returns:
        PrincipalConfig instance
    """
    principal_dict = principal_dict or {}
    members = principal_dict.get("members")
    if members is not None:
        members = [str(m) for m in members]
    return PrincipalConfig(name=str(name), members=members)


def parse_ace_config(ace_dict: Dict[str, Any]) -> AceConfig:
    """Parse an ACE dictionary.

    Args:
        ace_dict: ACE dictionary with principal, permission and effect

    Returns:
        AceConfig instance

    Raises:
        ValueError: If principal or permission is missing
    """
    if "principal" not in ace_dict or "permission" not in ace_dict:
        raise ValueError(f"ACE entry requires 'principal' and 'permission': {ace_dict}")
    return AceConfig(
        principal=str(ace_dict["principal"]),
        permission=str(ace_dict["permission"]),
        effect=str(ace_dict.get("effect", "allow")),
    )


def parse_file_config(file_dict: Dict[str, Any]) -> FileConfig:
    """Parse a file dictionary.

    Args:
        file_dict: File configuration dictionary

    Returns:
        FileConfig instance

    Raises:
        ValueError: If path is missing
    """
    if "path" not in file_dict:
        raise ValueError(f"File entry requires 'path': {file_dict}")
    return FileConfig(
        path=str(file_dict["path"]),
        parent=file_dict.get("parent"),
        inheritance=parse_bool(file_dict.get("inheritance", True)),
        acl=[parse_ace_config(a) for a in file_dict.get("acl", [])],
    )


def parse_config(config_dict: Dict[str, Any]) -> AclEngineConfig:
    """Parse the full configuration dictionary.

    Args:
        config_dict: Full configuration dictionary

    Returns:
        AclEngineConfig instance
    """
    logging_config = LoggingConfig()
    if "logging" in config_dict:
        logging_config = parse_logging_config(config_dict["logging"] or {})

    policy = PolicyConfig()
    if "policy" in config_dict:
        policy = parse_policy_config(config_dict["policy"] or {})

    domain = config_dict.get("domain") or {}
    principals = [
        parse_principal_config(name, options)
        for name, options in (domain.get("principals") or {}).items()
    ]
    files = [parse_file_config(f) for f in domain.get("files") or []]

    return AclEngineConfig(
        logging=logging_config,
        policy=policy,
        principals=principals,
        files=files,
    )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return _expand_env_vars(config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration.

    Args:
        obj: Configuration object (dict, list, str, etc.)

    Returns:
        Configuration with expanded environment variables
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_typed_config(config_path: str = DEFAULT_CONFIG_PATH) -> AclEngineConfig:
    """Load and parse configuration into typed dataclass.

    Args:
        config_path: Path to configuration file

    Returns:
        AclEngineConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    return parse_config(load_config(config_path))
