"""Headless CLI for syncing read-later lists.

Usage:
    readlater-sync --config config.yaml
    readlater-sync --config config.yaml --vault ~/Documents/MyVault --git-sync
    readlater-sync --provider wired --username env://WIRED_USER --password env://WIRED_PASS
    readlater-sync --list-credential-backends
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from functools import partial
from pathlib import Path

from dotenv import load_dotenv

from common.cli_helpers import non_negative_int, setup_logging
from common.config import find_config_path
from readlater_sync.config import CONFIG_DIR, Config, load_config, masked_config
from readlater_sync.credentials.resolver import CredentialResolver
from readlater_sync.errors import ConfigurationError, PersistenceError
from readlater_sync.models import ProviderConfig, SyncRun
from readlater_sync.providers.sources import SOURCES, TOKEN_SOURCES
from readlater_sync.scheduler import SyncScheduler
from readlater_sync.sync import sync

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_TOTAL_FAILURE = 2
EXIT_CONFIG_ERROR = 3
EXIT_PERSISTENCE_ERROR = 4

CONFIG_ENV_VAR = "READLATER_CONFIG"

SINGLE_PROVIDER_TEMPLATE = """## {{title}}
- **Source:** {{source}}
- **URL:** {{url}}
- **Author:** {{author}}

---
"""

EPILOG = """\
Credential references:
  op://vault/item/field   1Password CLI, e.g. op://Private/Wired/username
  bw://item/field         Bitwarden CLI, e.g. bw://wired-login/password
  env://NAME              environment variable (a local .env file is loaded)
  anything else           used as the literal value

Exit codes: 0 all providers synced (or none enabled), 1 some providers failed,
2 every provider failed, 3 configuration error, 4 output could not be written.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="readlater-sync",
        description="Sync read-later lists into a markdown note",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to a YAML/JSON settings file, or a config name in {CONFIG_DIR}",
    )
    parser.add_argument("--output", help="Output note path ('-' for stdout)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--append", dest="append", action="store_true", default=None,
        help="Append to the output note",
    )
    mode.add_argument(
        "--replace", dest="append", action="store_false",
        help="Replace the output note",
    )
    parser.add_argument("--vault", help="Obsidian vault root the output path is relative to")
    parser.add_argument(
        "--git-sync", action="store_true", default=None,
        help="Pull before and commit/push after writing (vault must be a git repository)",
    )
    parser.add_argument(
        "--provider",
        choices=list(SOURCES),
        help="Sync only this provider",
    )
    parser.add_argument("--username", help="Login username (or credential reference)")
    parser.add_argument("--password", help="Login password (or credential reference)")
    parser.add_argument("--api-key", help="API key for token providers (or credential reference)")
    parser.add_argument(
        "--watch", action="store_true",
        help="Keep running and sync every --interval minutes",
    )
    parser.add_argument(
        "--interval",
        type=partial(non_negative_int, field_name="--interval"),
        default=None,
        help="Minutes between syncs in --watch mode (default: syncInterval setting)",
    )
    parser.add_argument(
        "--list-credential-backends",
        action="store_true",
        help="List usable credential backends and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _inline_credentials(args: argparse.Namespace) -> dict[str, str]:
    credentials = {"username": args.username, "password": args.password, "apiKey": args.api_key}
    return {key: value for key, value in credentials.items() if value}


def _single_provider_config(args: argparse.Namespace) -> Config:
    credentials = _inline_credentials(args)
    if args.provider in TOKEN_SOURCES:
        if "apiKey" not in credentials:
            raise ConfigurationError(f"--provider {args.provider} requires --api-key")
    elif not {"username", "password"} <= set(credentials):
        raise ConfigurationError(f"--provider {args.provider} requires --username and --password")

    return Config(
        output_file="-",
        append_mode=False,
        template=SINGLE_PROVIDER_TEMPLATE,
        providers={args.provider: ProviderConfig(enabled=True, credentials=credentials)},
    )


def resolve_settings(args: argparse.Namespace) -> tuple[Config, Path | None]:
    """Build the run's settings from a config file or the single-provider flags."""
    config_path = None
    inline_credentials = _inline_credentials(args)

    if args.config is not None or not (args.provider and inline_credentials):
        try:
            config_path = find_config_path(args.config, CONFIG_DIR, env_var=CONFIG_ENV_VAR)
        except FileNotFoundError as e:
            if args.config is None:
                raise ConfigurationError(
                    "Must provide either --config or --provider with credentials"
                ) from e
            raise ConfigurationError(str(e)) from e
        config = load_config(config_path)
        if inline_credentials and args.provider:
            # Flags win over the file for this run only
            provider = config.providers.setdefault(args.provider, ProviderConfig())
            provider.credentials = {**provider.credentials, **inline_credentials}
        elif inline_credentials:
            logger.warning("--username, --password and --api-key are ignored without --provider")
    else:
        config = _single_provider_config(args)

    if args.output:
        config.output_file = args.output
    if args.append is not None:
        config.append_mode = args.append
    if args.vault:
        config.vault_path = args.vault
    if args.git_sync:
        config.git_sync = True
    if args.interval is not None:
        config.sync_interval = args.interval

    return config, config_path


def exit_code_for(run: SyncRun) -> int:
    if run.total_failure:
        return EXIT_TOTAL_FAILURE
    if run.failures:
        return EXIT_PARTIAL_FAILURE
    return EXIT_OK


def print_summary(run: SyncRun) -> None:
    if run.nothing_to_do:
        print("Nothing to do: no providers enabled")
        return
    print()
    for line in run.summary_lines():
        print(line)


def list_credential_backends(resolver: CredentialResolver) -> int:
    available = resolver.list_available()
    print("Available credential backends:")
    for name in available:
        print(f"  - {name}")
    if not available:
        print("  (none available - install the 1Password CLI or Bitwarden CLI)")
    return EXIT_OK


def run_once(args: argparse.Namespace, config: Config, config_path: Path | None) -> int:
    provider_id = args.provider if config_path is not None else None
    try:
        run = sync(config, config_path=config_path, provider_id=provider_id)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR
    except PersistenceError as e:
        logger.error("Failed to write output: %s", e)
        if e.run is not None:
            print_summary(e.run)
        if e.content:
            # Fetched articles are not dropped silently
            print(e.content)
        return EXIT_PERSISTENCE_ERROR

    print_summary(run)
    return exit_code_for(run)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.list_credential_backends:
        return list_credential_backends(CredentialResolver())

    try:
        config, config_path = resolve_settings(args)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    logger.debug("Starting sync with settings: %s", json.dumps(masked_config(config), indent=2))

    exit_code = run_once(args, config, config_path)
    if not args.watch:
        return exit_code

    if config.sync_interval <= 0:
        logger.error("--watch needs a positive --interval or syncInterval setting")
        return EXIT_CONFIG_ERROR

    scheduler = SyncScheduler(config.sync_interval, lambda: run_once(args, config, config_path))
    scheduler.start()
    logger.info("Watching: syncing every %d minutes (Ctrl-C to stop)", config.sync_interval)
    try:
        scheduler.wait()
    except KeyboardInterrupt:
        logger.info("Stopping")
    finally:
        scheduler.stop()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
