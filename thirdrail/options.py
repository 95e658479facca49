"""Command-line and environment configuration."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

DEFAULT_SERVICE_DOMAIN = "third-rail.services.smartatransit.com"
DEFAULT_CACHE_TTL = 15

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


@dataclass
class Options:
    """Settings for the service."""

    twitter_client_id: str = ""
    twitter_client_secret: str = ""
    marta_api_key: str = ""
    twitter_cache_ttl: int = DEFAULT_CACHE_TTL
    marta_cache_ttl: int = DEFAULT_CACHE_TTL
    db_connection_string: str = ""
    admin_api_key: str = ""
    service_domain: str = DEFAULT_SERVICE_DOMAIN
    rail_runner: bool = False


def parse_options(
    argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None
) -> Options:
    """Read options from ``argv``, falling back to ``environ`` and then the defaults.

    Invalid values end the program with a usage message.
    """
    env = os.environ if environ is None else environ
    parser = argparse.ArgumentParser(prog="third_rail", description="Serve SMARTA data.")

    def text(flag: str, var: str, default: str, help_text: str) -> None:
        parser.add_argument(flag, default=env.get(var, default), help=f"{help_text} [${var}]")

    def number(flag: str, var: str, help_text: str) -> None:
        default = DEFAULT_CACHE_TTL
        if var in env:
            try:
                default = int(env[var])
            except ValueError:
                parser.error(f"invalid value for ${var}: {env[var]!r}")
        parser.add_argument(flag, type=int, default=default, help=f"{help_text} [${var}]")

    text("--twitter-client-id", "TWITTER_CLIENT_ID", "", "the client id for the twitter account")
    text(
        "--twitter-client-secret",
        "TWITTER_CLIENT_SECRET",
        "",
        "the client secret for the twitter account",
    )
    text("--marta-api-key", "MARTA_API_KEY", "", "marta api key")
    number("--twitter-cache-ttl", "TWITTER_CACHE_TTL", "how long we keep the twitter responses")
    number("--marta-cache-ttl", "MARTA_CACHE_TTL", "how long we keep the marta responses")
    text("--db-connection-string", "DB_CONNECTION_STRING", "", "database connection string")
    text("--admin-api-key", "ADMIN_API_KEY", "", "admin api key")
    text(
        "--service-domain",
        "SERVICE_DOMAIN",
        DEFAULT_SERVICE_DOMAIN,
        "the domain at which the service is served",
    )

    rail_runner = False
    if "RAIL_RUNNER" in env:
        raw = env["RAIL_RUNNER"]
        if raw in _TRUE:
            rail_runner = True
        elif raw not in _FALSE:
            parser.error(f"invalid value for $RAIL_RUNNER: {raw!r}")
    parser.add_argument(
        "--rail-runner",
        action="store_true",
        default=rail_runner,
        help="enable the rail runner [$RAIL_RUNNER]",
    )

    return Options(**vars(parser.parse_args(argv)))