"""Command line adapter for the tuner.

Builds a SettingsTuner from command line options and prints the derived
parameters as postgresql.conf lines or as JSON.

Usage:
    pg-tuner --memory 16GB --type web --version 13 --cpu 4
    pg-tuner --memory 2GB --setting work_mem
    pg-tuner --memory 64GB --type dw --format json

Exit codes:
    0 - success
    1 - the requested --setting is not derived for this profile
    2 - invalid profile input
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence, TextIO

from pg_tuner.application import SettingsTuner
from pg_tuner.domain.entities import HardwareProfile
from pg_tuner.domain.value_objects import ValidationError
from pg_tuner.infrastructure.config import Config, get_config
from pg_tuner.infrastructure.logging import setup_logging
from pg_tuner.infrastructure.metrics import setup_metrics
from pg_tuner.infrastructure.tracing import setup_tracing
from pg_tuner.ports.inbound import SettingNotFoundError, SettingsProvider

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2


def build_parser(config: Config) -> argparse.ArgumentParser:
    """Create the argument parser, with defaults taken from configuration."""
    defaults = config.defaults
    parser = argparse.ArgumentParser(
        prog="pg-tuner",
        description="Recommend PostgreSQL settings for a workload and hardware profile",
    )
    parser.add_argument(
        "--memory", required=True, help="Total memory available to PostgreSQL (e.g. 16GB, 512MB)"
    )
    parser.add_argument(
        "--type",
        default=defaults.db_type,
        help="Workload type: web, oltp, dw, mixed, desktop (default: %(default)s)",
    )
    parser.add_argument(
        "--version",
        default=defaults.db_version,
        help="PostgreSQL version: 9.4 to 14 (default: %(default)s)",
    )
    parser.add_argument(
        "--platform",
        default=defaults.platform,
        help="Operating system: linux, darwin, windows (default: %(default)s)",
    )
    parser.add_argument(
        "--storage",
        default=defaults.storage,
        help="Storage class: ssd, hdd, san (default: %(default)s)",
    )
    parser.add_argument(
        "--connections", default="", help="Expected client connections (default: per workload)"
    )
    parser.add_argument("--cpu", default="", help="Number of CPUs (default: unspecified)")
    parser.add_argument(
        "--format",
        default="conf",
        choices=["conf", "json"],
        help="Output format (default: %(default)s)",
    )
    parser.add_argument("--setting", help="Print a single parameter instead of all of them")
    return parser


def render_header(profile: HardwareProfile) -> list[str]:
    """Comment lines describing the profile a configuration was derived for."""
    return [
        f"# DB Version: {profile.db_version.value}",
        f"# OS Type: {profile.platform.value}",
        f"# DB Type: {profile.db_type.value}",
        f"# Total Memory (RAM): {profile.total_memory.format()}",
        f"# CPUs num: {profile.cpu or 'unspecified'}",
        f"# Connections num: {profile.connections or 'default'}",
        f"# Data Storage: {profile.storage.value}",
    ]


def render_conf(provider: SettingsProvider, profile: HardwareProfile) -> str:
    """Render every derived parameter as postgresql.conf lines."""
    lines = render_header(profile)
    lines.append("")
    lines.extend(f"{name} = {value}" for name, value in provider.get_all_settings().items())
    return "\n".join(lines) + "\n"


def render_json(provider: SettingsProvider) -> str:
    return json.dumps(provider.get_all_settings(), indent=2) + "\n"


def lookup_setting(provider: SettingsProvider, name: str) -> str:
    """Resolve a parameter without knowing whether it is memory-valued.

    Raises:
        SettingNotFoundError: If neither table derives the parameter
    """
    try:
        return provider.get_memory_setting(name)
    except SettingNotFoundError:
        return provider.get_string_setting(name)


def configure_observability(config: Config) -> None:
    observability = config.observability
    setup_logging(observability.log_level, observability.log_format)
    if observability.metrics_port is not None:
        setup_metrics(observability.metrics_port)
    if observability.otel_endpoint:
        setup_tracing(observability.otel_service_name, observability.otel_endpoint)


def main(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    """Entry point of the ``pg-tuner`` console script."""
    out = out or sys.stdout
    config = get_config()
    args = build_parser(config).parse_args(argv)
    configure_observability(config)

    try:
        tuner = SettingsTuner(
            args.type,
            args.version,
            args.platform,
            args.memory,
            args.connections,
            args.storage,
            args.cpu,
        )
    except ValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INVALID

    if args.setting:
        try:
            value = lookup_setting(tuner, args.setting)
        except SettingNotFoundError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return EXIT_NOT_FOUND
        out.write(f"{args.setting} = {value}\n")
        return EXIT_OK

    if args.format == "json":
        out.write(render_json(tuner))
    else:
        out.write(render_conf(tuner, tuner.profile))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
