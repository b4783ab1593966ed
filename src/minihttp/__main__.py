"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m minihttp                              # 0.0.0.0:4221, files from cwd
    python -m minihttp --directory /tmp/data        # files from /tmp/data
    python -m minihttp --port 8080 --log-level DEBUG
    python -m minihttp --log-format json            # JSON access log

Flags override HTTP_* environment variables, which override defaults.

=============================================================================
"""

import argparse
import os
import sys

from . import __version__
from .app import create_app
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                          # Run with defaults
  python -m minihttp --directory /tmp/data    # Serve /files from /tmp/data
  python -m minihttp --port 8080              # Custom port
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection socket timeout in seconds (default: none)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Root directory for /files (default: current directory)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Start from the environment, then apply any flag that was given."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.directory is not None:
        config.directory = args.directory
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.directory is not None and not os.path.isdir(args.directory):
        parser.error(f"--directory {args.directory!r} is not a directory")

    try:
        server = create_app(config_from_args(args))
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
