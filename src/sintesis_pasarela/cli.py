"""
Command-line interface for requesting a Sintesis checkout link.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Sequence, Tuple

import requests

from .api import create_client
from .core.config import ConfigurationError, GatewayConfig, RenderMode, load_gateway_config
from .core.errors import PasarelaError
from .core.render import ApiDataResult, RenderResult


_ENV_PREFIX = "SINTESIS_"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _setting_override(value: str) -> Tuple[str, str]:
    """Parse ``--set``; a bare setting name gets the SINTESIS_ prefix."""
    name, sep, setting = value.partition("=")
    name = name.strip().upper()
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected SETTING=VALUE, got {value!r}")
    if not name.startswith(_ENV_PREFIX):
        name = _ENV_PREFIX + name
    return name, setting


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sintesis-pasarela",
        description="Authenticate against the Sintesis gateway and print a checkout link",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing SINTESIS_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_setting_override,
        metavar="SETTING=VALUE",
        default=None,
        help="Override a SINTESIS_* setting, e.g. --set timeout_ms=5000 (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--mode",
        choices=[RenderMode.API_ONLY.value, RenderMode.WEBVIEW.value],
        default=RenderMode.API_ONLY.value,
        help="Descriptor to produce (default: api-only)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full render descriptor as JSON instead of the bare URL",
    )
    return parser


def _describe(result: RenderResult) -> dict:
    if isinstance(result, ApiDataResult):
        return result.as_dict()
    return {
        "type": result.type,
        "url": result.url,
        "config": getattr(result, "config", {}),
        "environment": getattr(result, "environment", None),
    }


async def _checkout(config: GatewayConfig, mode: str) -> RenderResult:
    client = create_client(config=config, session=requests.Session())
    async with client:
        return await client.render(mode=mode)


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    overrides = dict(args.set or ())

    try:
        config = load_gateway_config(env_file=args.env_file, overrides=overrides)
    except (ConfigurationError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    logging.info("Requesting checkout link from %s", config.base_url)
    try:
        result = asyncio.run(_checkout(config, args.mode))
    except PasarelaError as exc:
        logging.error("Checkout link request failed: %s", exc)
        return 1

    if args.json:
        print(json.dumps(_describe(result), indent=2))
    else:
        print(result.embed_url if isinstance(result, ApiDataResult) else result.url)
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
