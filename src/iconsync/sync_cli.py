#!/usr/bin/env python3
"""
CLI for icon extraction and manifest publishing.

Usage:
    iconsync sync     --scene icons.json [--repo owner/repo] [--token TOKEN] [--dry-run] [--json]
    iconsync download --scene icons.json [--out manifest.json]
    iconsync settings show
    iconsync settings save --repo owner/repo --token TOKEN

Repository and token fall back to ICONSYNC_GITHUB_REPO / ICONSYNC_GITHUB_TOKEN
and then to the cached settings.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import SyncConfig
from .connectors.test_connector import ContentsTestConnector
from .core.exceptions import ConfigError
from .core.logging import configure_logging
from .core.models import SyncSettings
from .events import EventBus, EventName, SyncEventHandlers
from .runner import build_orchestrator
from .scene import JsonSceneProvider
from .settings import InMemorySettingsCache, JsonFileSettingsCache, SettingsCache


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

SAVE_WAIT_SECONDS = 5.0


def setup_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Configure logging."""
    log_level = logging.DEBUG if verbose else logging.INFO

    if json_logs:
        configure_logging(level=log_level, structured=True)
        return

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _mask(token: str) -> str:
    if not token:
        return ""
    return f"{token[:4]}{'*' * max(len(token) - 4, 0)}"


def resolve_settings(args, cache: SettingsCache) -> Optional[SyncSettings]:
    """Resolve repository and token from arguments, environment, then cache."""
    cached = cache.load()
    repository = args.repo or SyncConfig.get_env_repository() or (cached.repository if cached else "")
    token = args.token or SyncConfig.get_env_token() or (cached.access_token if cached else "")
    if not repository or not token:
        return None
    return SyncSettings(repository=repository, access_token=token)


def _wire(config: SyncConfig, scene: Path, cache: SettingsCache, connector=None):
    bus = EventBus()
    provider = JsonSceneProvider(scene)
    handlers = SyncEventHandlers(
        bus,
        lambda progress: build_orchestrator(config, provider, connector=connector, progress=progress),
        cache,
    ).register()
    bus.on(EventName.SYNC_PROGRESS, lambda message: print(message, file=sys.stderr))
    return bus, handlers


def _wait_for_save(handlers: SyncEventHandlers) -> None:
    if handlers.last_save is not None:
        handlers.last_save.join(SAVE_WAIT_SECONDS)


def cmd_sync(args, config: SyncConfig) -> int:
    """Extract icons and publish the manifest to GitHub."""
    logger = logging.getLogger(__name__)

    if args.dry_run:
        cache: SettingsCache = InMemorySettingsCache()
        connector = ContentsTestConnector()
        settings = SyncSettings(
            repository=args.repo or connector.repository,
            access_token=args.token or "dry-run-token-000000000000",
        )
        logger.info("Dry run: publishing to an in-memory repository")
    else:
        cache = JsonFileSettingsCache(config.get_settings_cache_path())
        connector = None
        settings = resolve_settings(args, cache)
        if settings is None:
            logger.error("Repository and token are required (--repo/--token, environment, or cached settings)")
            return EXIT_USAGE

    bus, handlers = _wire(config, Path(args.scene), cache, connector)

    outcome = {}
    bus.on(
        EventName.SYNC_TO_GITHUB_RESULT,
        lambda success, message: outcome.update(success=success, message=message),
    )
    bus.emit(EventName.SYNC_TO_GITHUB, settings)
    _wait_for_save(handlers)

    result = handlers.last_result
    if args.json and result is not None:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(outcome.get("message", ""))

    if result is not None and result.publish_result is not None:
        publish = result.publish_result
        action = "Created" if publish.created else "Updated"
        logger.info(f"{action} {publish.path} (commit {publish.commit_sha})")

    return EXIT_OK if outcome.get("success") else EXIT_FAILURE


def cmd_download(args, config: SyncConfig) -> int:
    """Build the manifest locally and write it to a file or stdout."""
    logger = logging.getLogger(__name__)

    bus, _ = _wire(config, Path(args.scene), InMemorySettingsCache())

    outcome = {}
    bus.on(EventName.MANIFEST_DATA, lambda data: outcome.update(data=data))
    bus.on(EventName.MANIFEST_ERROR, lambda message: outcome.update(error=message))
    bus.emit(EventName.DOWNLOAD_MANIFEST)

    if "data" not in outcome:
        return EXIT_FAILURE

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(outcome["data"])
            f.write("\n")
        logger.info(f"Manifest written to: {out_path}")
    else:
        print(outcome["data"])
    return EXIT_OK


def cmd_settings(args, config: SyncConfig) -> int:
    """Show or save the cached sync settings."""
    cache = JsonFileSettingsCache(config.get_settings_cache_path())

    if args.settings_command == "show":
        received = {}
        bus = EventBus()
        SyncEventHandlers(bus, lambda progress: None, cache).register()
        bus.on(EventName.CACHED_SETTINGS_RESULT, lambda settings: received.update(settings=settings))
        bus.emit(EventName.GET_CACHED_SETTINGS)

        settings = received.get("settings")
        if settings is None:
            print("No cached settings", file=sys.stderr)
            return EXIT_FAILURE
        print(f"Repository: {settings.repository}")
        print(f"Token:      {_mask(settings.access_token)}")
        return EXIT_OK

    if args.settings_command == "save":
        bus = EventBus()
        handlers = SyncEventHandlers(bus, lambda progress: None, cache).register()
        bus.emit(EventName.SAVE_SETTINGS, SyncSettings(repository=args.repo, access_token=args.token))
        _wait_for_save(handlers)
        print(f"Settings saved to: {cache.path}")
        return EXIT_OK

    print("No settings command specified. Use --help for usage.", file=sys.stderr)
    return EXIT_USAGE


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract 24x24 icons from a scene document and publish them as a manifest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")
    parser.add_argument("--config", type=str, help="Path to YAML config file")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # sync
    sync_parser = subparsers.add_parser("sync", help="Publish the icon manifest to GitHub")
    sync_parser.add_argument("--scene", required=True, help="Path to scene document (JSON)")
    sync_parser.add_argument("--repo", help="Target repository (owner/repo)")
    sync_parser.add_argument("--token", help="GitHub access token")
    sync_parser.add_argument("--dry-run", action="store_true", help="Publish to an in-memory repository")
    sync_parser.add_argument("--json", action="store_true", help="Print the run result as JSON")

    # download
    download_parser = subparsers.add_parser("download", help="Build the manifest locally")
    download_parser.add_argument("--scene", required=True, help="Path to scene document (JSON)")
    download_parser.add_argument("--out", help="Output file (default: stdout)")

    # settings
    settings_parser = subparsers.add_parser("settings", help="Manage cached sync settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Show cached settings")
    save_parser = settings_sub.add_parser("save", help="Cache repository and token")
    save_parser.add_argument("--repo", required=True, help="Target repository (owner/repo)")
    save_parser.add_argument("--token", required=True, help="GitHub access token")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(verbose=args.verbose, json_logs=args.json_logs)
    logger = logging.getLogger(__name__)

    try:
        config = SyncConfig(Path(args.config) if args.config else None)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_USAGE

    logging_config = config.get_logging_config()
    if logging_config.get("structured") and not args.json_logs:
        level = logging.DEBUG if args.verbose else getattr(
            logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO
        )
        configure_logging(level=level, structured=True)

    if args.command == "sync":
        return cmd_sync(args, config)
    elif args.command == "download":
        return cmd_download(args, config)
    elif args.command == "settings":
        return cmd_settings(args, config)
    else:
        print("No command specified. Use --help for usage.", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
