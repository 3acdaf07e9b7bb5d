"""Inbound adapters for the tuner.

Inbound adapters handle incoming requests and convert them to
internal domain operations.

Exports:
    CLI:
        - main: ``pg-tuner`` console script entry point
        - build_parser: Argument parser with configured defaults
        - render_conf: postgresql.conf rendering
        - render_json: JSON rendering
        - lookup_setting: Single parameter lookup across both tables
"""

from pg_tuner.adapters.inbound.cli import (
    build_parser,
    lookup_setting,
    main,
    render_conf,
    render_json,
)

__all__ = [
    "main",
    "build_parser",
    "render_conf",
    "render_json",
    "lookup_setting",
]
