"""
Entry point: argument parsing, run-level error handling, exit codes.

Exit 0 when every device was visited (individual devices may have failed),
1 when the run could not start or the attendance snapshot could not be built.
"""

import argparse
import sys

from .constants import RECONCILER_VERSION
from .config import log, safe_print, load_config, setup_logging
from .dates import resolve_window
from .exceptions import ConfigError, SnapshotLoadError, TokenError
from . import http_client
from .attendance import load_snapshot
from .auth_token import TokenProvider
from .reconcile import Reconciler


def build_parser():
    parser = argparse.ArgumentParser(
        prog="acs-reconcile",
        description="Submit access-control device punches missing from the attendance system.",
    )
    parser.add_argument("--period-start", default="", help="First day to reconcile (YYYY-MM-DD)")
    parser.add_argument("--period-end", default="", help="Last day to reconcile (YYYY-MM-DD)")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {RECONCILER_VERSION}")
    return parser


def _log_summary(reports):
    failed = [r for r in reports if not r.ok]
    submitted = sum(r.submitted for r in reports)
    failed_submissions = sum(r.failed_submissions for r in reports)
    for report in failed:
        log.warning("Device %s was not reconciled: %s", report.base_url, report.error)
    log.info(
        "All devices processed: %d devices (%d failed), %d punches submitted, %d submissions failed",
        len(reports), len(failed), submitted, failed_submissions,
    )


def main(argv=None):
    """Primary entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.env_file)
        setup_logging(config["logFile"], config["logLevel"])
        window = resolve_window(args.period_start, args.period_end, config["lastDays"])
    except ConfigError as e:
        setup_logging()
        log.error("Invalid configuration: %s", e)
        return 1

    log.info("Reconcile attendance data %s - %s", window.start_str, window.end_str)
    if not config["devices"]:
        log.warning("No devices configured (DEVICES is empty)")

    attendance_session = http_client.create_session()
    device_session = http_client.create_device_session()
    try:
        tokens = TokenProvider(attendance_session, config)
        tokens.get_token()

        log.info("Fetching attendance data ...")
        snapshot = load_snapshot(attendance_session, config, tokens, window)

        reconciler = Reconciler(config, snapshot, window, tokens,
                                attendance_session, device_session)
        reports = reconciler.run(config["devices"])
    except TokenError as e:
        log.error("Fatal error retrieving token: %s", e)
        return 1
    except SnapshotLoadError as e:
        log.error("%s", e)
        return 1
    finally:
        http_client.close_session(device_session)
        http_client.close_session(attendance_session)

    _log_summary(reports)
    return 0


def run():
    """Console-script wrapper."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        safe_print("\nReconciliation stopped by user.")
        sys.exit(130)
