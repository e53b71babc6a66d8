"""Command line health check for Snowflake data source settings files."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path

from .config import SettingsFileError, load_settings_file
from .connections import PASSWORD_KEY, PRIVATE_KEY_KEY
from .datasource import SnowflakeDatasource
from .health import create_and_validate_connection_string
from .models import CheckHealthRequest, HealthStatus, PluginContext

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
SECRET_ENV_VARS = {
    PASSWORD_KEY: "SNOWFLAKE_PASSWORD",
    PRIVATE_KEY_KEY: "SNOWFLAKE_PRIVATE_KEY",
}
MASK = "REDACTED"


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="snowflake-datasource", description=__doc__)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Root logger level",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check", help="Validate a settings file")
    check.add_argument("settings", type=Path, help="TOML file with [json_data] and [secure_json_data] tables")
    check.add_argument("--org-id", type=int, default=0, help="Organization id recorded in the query tag")
    check.add_argument(
        "--show-connection-string",
        action="store_true",
        help="Print the connection string with secrets masked",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)

    overrides = {key: os.environ.get(var, "") for key, var in SECRET_ENV_VARS.items()}
    try:
        settings = load_settings_file(args.settings).to_instance_settings(overrides)
    except SettingsFileError as exc:
        print(exc, file=sys.stderr)
        return 2

    request = CheckHealthRequest(
        plugin_context=PluginContext(org_id=args.org_id, data_source_instance_settings=settings)
    )
    datasource = SnowflakeDatasource()
    try:
        result = datasource.check_health(request)
    finally:
        datasource.dispose()
    print(f"{result.status.value}: {result.message}")

    if result.status is HealthStatus.OK and args.show_connection_string:
        print(_masked_connection_string(request))
    return 0 if result.status is HealthStatus.OK else 1


def _masked_connection_string(request: CheckHealthRequest) -> str:
    ctx = request.plugin_context
    settings = ctx.data_source_instance_settings
    masked = {
        key: MASK
        for key, value in settings.decrypted_secure_json_data.items()
        if key in SECRET_ENV_VARS and value
    }
    masked_settings = dataclasses.replace(settings, decrypted_secure_json_data=masked)
    masked_request = CheckHealthRequest(
        plugin_context=dataclasses.replace(ctx, data_source_instance_settings=masked_settings)
    )
    connection_string, _ = create_and_validate_connection_string(masked_request)
    return connection_string


__all__ = ["main", "parse_args"]
