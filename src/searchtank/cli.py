"""CLI entry point for SearchTank index maintenance."""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path
from typing import Any

from searchtank.config.settings import Settings
from searchtank.core.engine import SearchTank


def load_tank(target: str, settings: Settings) -> SearchTank:
    """Import ``module:attr`` and return the ``SearchTank`` it names.

    ``attr`` may be a ``SearchTank`` instance or a factory called with the
    loaded settings::

        def make_tank(settings: Settings) -> SearchTank:
            api = ApiClient.from_settings(settings.service)
            return SearchTank(registry, api, settings)
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Expected 'module:attribute', got '{target}'")

    obj: Any = getattr(importlib.import_module(module_name), attr)
    if callable(obj) and not isinstance(obj, SearchTank):
        obj = obj(settings)
    if not isinstance(obj, SearchTank):
        raise TypeError(f"{target} did not provide a SearchTank (got {type(obj).__name__})")
    return obj


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="searchtank",
        description="SearchTank — Index maintenance for hosted search",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--registry",
        "-r",
        type=str,
        required=True,
        help="Import path 'module:attr' of a SearchTank or a factory taking Settings",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"SearchTank {_get_version()}",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("indexes", help="List indexable models and their indexes")
    commands.add_parser("clear", help="Delete and recreate every known index")

    reindex = commands.add_parser("reindex", help="Push all records to their indexes")
    reindex.add_argument("--model", "-m", type=str, default=None, help="Only reindex this model (by type name)")
    reindex.add_argument("--batch-size", "-b", type=int, default=None, help="Records per bulk call")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            return 1
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    if args.log_level:
        settings.observability.log_level = args.log_level

    from searchtank.observability.logging import setup_logging

    setup_logging(settings.observability)

    from searchtank.admin.lifecycle import IndexLifecycle

    tank = load_tank(args.registry, settings)
    lifecycle = IndexLifecycle(tank, settings)

    if args.command == "indexes":
        for model in lifecycle.get_model_classes():
            config = tank.registry.config_for(model)
            print(f"{config.type_name}\t{config.index_name}")
        return 0

    if args.command == "clear":
        return 0 if lifecycle.clear_all_indexes() else 1

    if args.model:
        model = tank.registry.resolve(args.model)
        ok = lifecycle.reindex_model(model, batch_size=args.batch_size)
    else:
        ok = lifecycle.reindex_all_models(batch_size=args.batch_size)
    return 0 if ok else 1


def _get_version() -> str:
    """Get the package version."""
    try:
        from searchtank import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    sys.exit(main())
