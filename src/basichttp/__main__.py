"""
=============================================================================
HTTP SERVER CLI ENTRY POINT
=============================================================================

Runs the demo server: every request gets the same small HTML page.

=============================================================================
USAGE
=============================================================================

    # Run with defaults (127.0.0.1:3000)
    python -m basichttp

    # Custom port
    python -m basichttp --port 8080

    # Full bind address in one go
    python -m basichttp --address 0.0.0.0:3000

    # JSON access log, chattier server log
    python -m basichttp --log-format json --log-level DEBUG

Defaults come from the environment (HTTP_HOST, HTTP_PORT, HTTP_TIMEOUT,
HTTP_LOG_LEVEL, HTTP_LOG_FORMAT); flags override them.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import HTTPServer
from .config import ServerConfig, parse_address
from .http import HTTPRequest, HTTPResponse, HTTPStatus, ResponseBuilder


def hello(request: HTTPRequest) -> HTTPResponse:
    """Demo handler: answers every request with a greeting page."""
    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .header("Content-Type", "text/html")
        .header("X-Powered-By", "python/basic-http-server")
        .body("<h1>Hello, world!</h1>")
        .build())


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="basichttp",
        description="Minimal HTTP/1.1 server over raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m basichttp                          # Run with defaults
  python -m basichttp --port 8080              # Custom port
  python -m basichttp --address 0.0.0.0:3000   # Listen on all interfaces
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--address", "-a",
        default=None,
        metavar="HOST:PORT",
        help="Bind address; overrides --host and --port"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help=f"Per-connection socket timeout in seconds (default: {defaults.timeout})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help="Logging level (default: %(default)s)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=defaults.log_format,
        help="Access log format (default: %(default)s)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"basichttp {__version__}"
    )

    return parser


def main(argv=None):
    """
    Main CLI entry point.

    Returns only on shutdown; startup errors exit with status 1.
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment: {e}", file=sys.stderr)
        sys.exit(1)

    args = build_parser(defaults).parse_args(argv)

    try:
        host, port = args.host, args.port
        if args.address:
            host, port = parse_address(args.address)

        config = ServerConfig(
            host=host,
            port=port,
            timeout=args.timeout,
            log_level=args.log_level,
            log_format=args.log_format,
        )
        server = HTTPServer(hello, config)

        # Blocks until Ctrl+C / SIGTERM
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
