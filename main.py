"""Main entry point for the agent relay watcher.

Watches BOTH the local flag directory (flags written by agents on this
machine) and the GitHub repository copy of the same flags (flags pushed by
remote agents). When either channel sees a new flag you get a desktop toast,
a paste-ready prompt on the clipboard and a console banner.
"""
from dotenv import load_dotenv
import argparse
import asyncio
import os
import sys

# Load environment variables first, before any other imports
load_dotenv()

from pydantic import ValidationError

from relay.config import reload_config
from relay.errors import RelayStartupError
from relay.runner import run_relay
from relay.utils.logger import configure_logging, log_error, log_info


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Relay agent-to-agent handoff flags to your desktop.")
    parser.add_argument('--repo', type=str, help='GitHub repository holding remote flags (owner/name).')
    parser.add_argument('--branch', type=str, help='Branch to read remote flags from.')
    parser.add_argument('--flag-dir', type=str, help='Local flag directory (default: .handoff).')
    parser.add_argument('--remote-poll', type=float, help='Seconds between remote polls (default: 10).')
    parser.add_argument('--local-poll', type=float, help='Seconds between local fallback scans (default: 5).')
    parser.add_argument('--debounce-ms', type=int, help='Debounce window for local change events (default: 750).')
    parser.add_argument('--no-clipboard', action='store_true', help='Do not copy the prompt to the clipboard.')
    parser.add_argument('--no-toast', action='store_true', help='Do not show desktop notifications.')
    parser.add_argument('--no-remote', action='store_true', help='Only watch the local flag directory.')
    parser.add_argument('--log-level', type=str, help='Logging level (DEBUG, INFO, ...).')
    return parser


def apply_args(args: argparse.Namespace) -> None:
    """Apply parsed arguments to environment variables."""
    if args.repo is not None:
        os.environ['GITHUB_REPO'] = args.repo
    if args.branch is not None:
        os.environ['GITHUB_BRANCH'] = args.branch
    if args.flag_dir is not None:
        os.environ['LOCAL_FLAG_DIR'] = args.flag_dir
    if args.remote_poll is not None:
        os.environ['REMOTE_POLL_SECONDS'] = str(args.remote_poll)
    if args.local_poll is not None:
        os.environ['LOCAL_POLL_SECONDS'] = str(args.local_poll)
    if args.debounce_ms is not None:
        os.environ['DEBOUNCE_MS'] = str(args.debounce_ms)
    if args.no_clipboard:
        os.environ['CLIPBOARD_ENABLED'] = 'false'
    if args.no_toast:
        os.environ['TOAST_ENABLED'] = 'false'
    if args.no_remote:
        os.environ['REMOTE_ENABLED'] = 'false'
    if args.log_level is not None:
        os.environ['LOG_LEVEL'] = args.log_level


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    apply_args(args)

    # Load and validate configuration
    try:
        config = reload_config()
    except ValidationError as e:
        log_error("Configuration could not be loaded", errors=e.errors())
        print(f"❌ Invalid configuration:\n{e}")
        return 1
    configure_logging(config.log_level, config.log_format)
    config.log_configuration()

    issues = config.validate_configuration()
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("❌ Configuration issues found:")
        for issue in issues:
            print(f"  - {issue}")
        print("\nPlease fix these issues and try again.")
        return 1

    print("")
    print("=== AGENT RELAY WATCHER ===")
    print("Watching for notifications from both agents...")

    try:
        asyncio.run(run_relay(config))
    except RelayStartupError as e:
        log_error("[fatal] relay could not start", error=e.message, path=e.path)
        return 1
    except KeyboardInterrupt:
        log_info("Interrupted; relay stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
