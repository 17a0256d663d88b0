from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import Any

from wg_restarter.config import (
    BlankInterfaceError,
    ConfigError,
    build_monitor_config,
    command_timeout,
    load_yaml,
    merge_settings,
)
from wg_restarter.log import setup_logging
from wg_restarter.supervisor import StartupFailure, Supervisor
from wg_restarter.units import SystemdUnitController
from wg_restarter.wg import WireGuardStatusSource

VERSION = "0.1.0"

EXIT_USAGE = 2
EXIT_BLANK_INTERFACE = 3
EXIT_UNIT_INACTIVE = 4
EXIT_UNIT_QUERY_FAILED = 5

_STARTUP_EXIT_CODES = {
    StartupFailure.UNIT_INACTIVE: EXIT_UNIT_INACTIVE,
    StartupFailure.UNIT_QUERY_FAILED: EXIT_UNIT_QUERY_FAILED,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wg-restarter",
        description="Restart a wg-quick systemd unit when its WireGuard handshake goes stale",
    )
    parser.add_argument("-c", "--config", help="path to yaml config")
    parser.add_argument("-t", "--timeout", help="handshake timeout (default 10m)")
    parser.add_argument("-L", "--loop-interval", help="loop interval (default 60s)")
    parser.add_argument(
        "-R",
        "--retry-after-unit-restart",
        help="wait after a unit restart before polling again (default 30s)",
    )
    parser.add_argument("--log-level", help="debug, info, warning or error (default info)")
    parser.add_argument(
        "--no-timestamps",
        action="store_true",
        help="omit timestamps from log lines (for journald)",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s v{VERSION}")
    parser.add_argument("interface", nargs="?", help="WireGuard interface to monitor")
    return parser


def _install_signal_handlers(logger: logging.Logger) -> None:
    def _terminate(signum: int, _frame: Any) -> None:
        logger.info("received %s; exiting", signal.Signals(signum).name)
        raise SystemExit(0)

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _terminate)


def run(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    raw_args = sys.argv[1:] if argv is None else argv
    if not raw_args:
        parser.print_help(sys.stderr)
        return EXIT_USAGE
    args = parser.parse_args(raw_args)

    try:
        file_cfg = load_yaml(args.config) if args.config else {}
    except ConfigError as exc:
        parser.error(str(exc))
    settings = merge_settings(
        file_cfg,
        {
            "interface": args.interface,
            "timeout": args.timeout,
            "loop_interval": args.loop_interval,
            "retry_after_unit_restart": args.retry_after_unit_restart,
            "log_level": args.log_level,
        },
    )
    setup_logging(settings["log_level"], timestamps=not args.no_timestamps)
    logger = logging.getLogger("wg_restarter.main")

    try:
        config = build_monitor_config(settings)
        cmd_timeout = command_timeout(settings)
    except BlankInterfaceError as exc:
        logger.error("%s; exiting", exc)
        return EXIT_BLANK_INTERFACE
    except ConfigError as exc:
        logger.error("invalid configuration: %s", exc)
        return EXIT_USAGE

    supervisor = Supervisor(
        config,
        WireGuardStatusSource(str(settings["wg_bin"]), timeout=cmd_timeout),
        SystemdUnitController(str(settings["systemctl_bin"]), timeout=cmd_timeout),
    )
    failure = supervisor.startup()
    if failure is not None:
        return _STARTUP_EXIT_CODES[failure]

    _install_signal_handlers(logger)
    supervisor.run()
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
