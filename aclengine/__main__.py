"""CLI interface for inspecting permissions in a configured ACL domain."""

import sys
from typing import List, Optional

from .common.config import load_typed_config
from .common.logger import setup_logger
from .common.settings import get_settings
from .core import (
    AclEngineError,
    CycleDetected,
    Effect,
    Permission,
    PermissionEngine,
    explanation_text,
)

USAGE = "Usage: python -m aclengine [config.yaml] <path> <principal> [permission]"


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the inspector CLI."""
    args = list(sys.argv[1:] if argv is None else argv)
    settings = get_settings()

    # The config path may come from ACLENGINE_CONFIG_PATH instead of argv
    if settings.config_path and args and not args[0].endswith((".yaml", ".yml")):
        args.insert(0, settings.config_path)
    if len(args) not in (3, 4):
        print(USAGE, file=sys.stderr)
        return 1

    config_path, path, principal = args[:3]
    permission_name = args[3] if len(args) == 4 else None

    try:
        config = load_typed_config(config_path)
        setup_logger(
            "aclengine",
            log_dir=config.logging.log_dir or settings.log_dir,
            level=settings.effective_log_level if settings.debug else config.logging.level,
            file_logging=config.logging.file_logging or settings.file_logging,
            console_logging=config.logging.console_logging,
        )
    except (OSError, TypeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        engine = PermissionEngine.from_config(config)
        effective = engine.effective_permissions(path, principal)
        grouped = engine.grouped_permissions(path, principal)
        explanation = (
            engine.explain(path, principal, Permission.from_string(permission_name))
            if permission_name
            else None
        )
    except CycleDetected as e:
        print(f"Integrity error: {e}", file=sys.stderr)
        return 2
    except (AclEngineError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"File: {path}")
    print(f"Principal: {principal}")
    for effect in Effect:
        print(f"{effect.value.capitalize()}:")
        for permission, entry in effective.for_effect(effect).items():
            origin = f"inherited from {entry.file.path}" if entry.inherited else "direct"
            print(f"  {permission.value} [{entry.principal}, {origin}]")

    print("Groups:")
    for group, status in grouped.allow.items():
        deny_status = grouped.deny[group]
        print(f"  {group.label}: allow={status.state.value} deny={deny_status.state.value}")

    if explanation is not None:
        print(explanation_text(explanation))

    return 0


if __name__ == "__main__":
    sys.exit(main())
