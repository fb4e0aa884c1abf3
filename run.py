#!/usr/bin/env python3
"""
Health Monitor - Server Launcher
================================

Usage:
    python run.py                    # Serve on HOST:PORT from settings
    python run.py --port 8080        # Override the port
    python run.py --reload           # Auto-reload on code changes (development)
"""

import argparse
import sys

import uvicorn

from app.config import get_settings
from healthmonitor.errors import ConfigurationError


def print_header(text):
    print(f"\n{'=' * 60}")
    print(f"  {text}")
    print('=' * 60)


def print_error(text):
    print(f"\n❌ ERROR: {text}")


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Health Monitor - Server Launcher",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                 # Serve with settings from the environment / .env
  python run.py --port 8080     # Override the port
  python run.py --reload        # Development auto-reload
        """
    )
    parser.add_argument("--host", default=settings.HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    print_header(f"{settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    print(f"  Listening on http://{args.host}:{args.port}")

    try:
        settings.validate_for_startup()
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(1)

    # uvicorn drains in-flight requests on SIGINT/SIGTERM, then force-exits
    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        proxy_headers=settings.TRUST_PROXY,
        forwarded_allow_ips="*" if settings.TRUST_PROXY else None,
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SECONDS,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
