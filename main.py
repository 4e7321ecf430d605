#!/usr/bin/env python3
"""
Main entry point for devprovision - idempotent provisioning of developer infrastructure tools.
"""

import asyncio
import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from config.settings import Settings
from devprovision.catalog import Toolbox, build_default_registry
from devprovision.core import (
    ArtifactManager,
    BackoffPoller,
    ProvisioningOrchestrator,
    ToolRegistry,
    detect_platform,
    render_report,
)
from devprovision.models import Platform
from devprovision.utils import setup_root_logger


EXIT_USAGE = 2


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="devprovision",
        description="Ensure developer infrastructure tools are installed, running and responsive"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Log file path (default: logs/devprovision.log)"
    )

    parser.add_argument(
        "--platform",
        choices=[p.value for p in Platform if p != Platform.UNKNOWN],
        help="Skip platform detection and provision for this platform"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    ensure = subparsers.add_parser("ensure", help="Install, start and verify a tool")
    ensure.add_argument("tool", help="Tool name, see 'list'")
    ensure.add_argument(
        "--timeout",
        type=float,
        help="Overall deadline in seconds for readiness polling"
    )
    ensure.add_argument(
        "--report-json",
        type=Path,
        help="Write the run report to this JSON file"
    )
    ensure.add_argument(
        "--no-sudo",
        action="store_true",
        help="Never prefix privileged commands with sudo"
    )

    subparsers.add_parser("list", help="List known tools and whether this platform supports them")
    subparsers.add_parser("detect", help="Print the detected platform")

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file and environment, then apply command line overrides."""
    config_data = {}
    if args.config:
        with open(args.config) as f:
            config_data = json.load(f)

    # Override with command line args
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level
    if args.log_file:
        config_data.setdefault("logging", {})["file_path"] = str(args.log_file)
    if args.platform:
        config_data["platform"] = args.platform
    if getattr(args, "no_sudo", False):
        config_data.setdefault("execution", {})["use_sudo"] = False

    return Settings(**config_data)


def install_signal_handlers(cancel_event: asyncio.Event) -> None:
    """Set the cancel event on SIGINT/SIGTERM where the event loop supports it."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers
            pass


def list_tools(registry: ToolRegistry, platform: Platform) -> None:
    for definition in registry:
        support = "supported" if definition.supports(platform) else "unsupported"
        print(f"{definition.name:<12} {support:<12} {definition.description}")


async def provision(args, settings: Settings, registry: ToolRegistry, platform: Platform) -> int:
    logger = logging.getLogger(__name__)

    cancel_event = asyncio.Event()
    install_signal_handlers(cancel_event)

    deadline = None
    if args.timeout:
        deadline = asyncio.get_running_loop().time() + args.timeout

    execution = settings.execution
    orchestrator = ProvisioningOrchestrator(
        registry=registry,
        platform=platform,
        poller=BackoffPoller(probe_timeout=execution.probe_timeout),
        probe_timeout=execution.probe_timeout,
        action_timeout=execution.action_timeout,
        policy_overrides=settings.polling.policies_for(registry.names()),
        cancel_event=cancel_event,
        deadline=deadline
    )

    report = await orchestrator.provision(args.tool)
    print(render_report(report))

    if args.report_json or settings.artifacts.save_reports:
        artifact_manager = ArtifactManager(base_path=settings.artifacts.base_path)
        path = artifact_manager.save_report(report, args.report_json)
        logger.info(f"Run report saved to {path}")

    return report.exit_code


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_arguments(argv)

    try:
        settings = load_config(args)
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    log_config = settings.logging
    setup_root_logger(
        log_config.file_path,
        log_config.level,
        log_config.format,
        max_bytes=log_config.max_file_size_mb * 1024 * 1024,
        backup_count=log_config.backup_count
    )
    logger = logging.getLogger(__name__)
    logger.debug(f"Arguments: {vars(args)}")

    try:
        platform = settings.platform or detect_platform()
        execution = settings.execution
        toolbox = Toolbox.create(
            command_timeout=execution.command_timeout,
            use_sudo=execution.use_sudo,
            download_timeout=execution.download_timeout,
            probe_timeout=execution.probe_timeout
        )
        registry = build_default_registry(toolbox)

        if args.command == "detect":
            print(platform.value)
            return 0

        if args.command == "list":
            list_tools(registry, platform)
            return 0

        if args.tool not in registry:
            logger.error(f"Unknown tool: {args.tool}")
            print(f"Unknown tool '{args.tool}'. Available: {', '.join(registry.names())}", file=sys.stderr)
            return EXIT_USAGE

        logger.info(f"Starting devprovision for {args.tool} on {platform.value}")
        return await provision(args, settings, registry, platform)

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
