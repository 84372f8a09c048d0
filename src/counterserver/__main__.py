"""
=============================================================================
COUNTER SERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (0.0.0.0:8080, ./static)
    python -m counterserver

    # Custom port and static directory
    counterserver --port 3000 --static ./public

    # Answer CORS preflight requests
    counterserver --cors-preflight

Flags win over COUNTER_* environment variables, which win over the
defaults in ServerConfig.

Exit status: 0 after SIGINT/SIGTERM, 1 if the server cannot start.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .app import create_app
from .config import ServerConfig
from .server import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="counterserver",
        description="Minimal HTTP counter service with a static browser UI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  counterserver                          # Run with defaults
  counterserver --port 3000              # Custom port
  counterserver --host 127.0.0.1         # Localhost only
  counterserver --static ./public        # Serve UI from ./public
  counterserver --cors-preflight         # Answer OPTIONS with 204
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0, env COUNTER_HOST)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080, env COUNTER_PORT)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--static", "-s",
        default=None,
        help="Directory holding index.html and /static/ files "
             "(default: static, env COUNTER_STATIC_DIR)"
    )

    parser.add_argument(
        "--cors-preflight",
        action="store_true",
        default=None,
        help="Answer OPTIONS preflight requests (env COUNTER_CORS_PREFLIGHT)"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: INFO, env COUNTER_LOG_LEVEL)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"counterserver {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace, environ=None) -> ServerConfig:
    """Environment first, then any flag that was given on top."""
    config = ServerConfig.from_env(environ)

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.static is not None:
        config.static_dir = args.static
    if args.cors_preflight is not None:
        config.cors_preflight = args.cors_preflight
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
        setup_logging(config.log_level)
        server = create_app(config)
        server.bind()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
