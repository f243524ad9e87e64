#!/usr/bin/env python3
"""Standalone entry point for the labnotify backend.

Accepts --port, --host and --data-dir and sets environment variables
BEFORE importing any labnotify modules, so pydantic-settings picks them up.
"""

import argparse
import os


def main():
    parser = argparse.ArgumentParser(description="labnotify notification dispatcher")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory for the SQLite database (ignored when DATABASE_URL is set)",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    os.environ["API_PORT"] = str(args.port)
    os.environ["API_HOST"] = args.host
    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level.upper()
    if "DATABASE_URL" not in os.environ:
        data_dir = args.data_dir or os.getcwd()
        os.makedirs(data_dir, exist_ok=True)
        os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(data_dir, 'labnotify.db')}"

    import uvicorn

    uvicorn.run(
        "labnotify.main:app",
        host=args.host,
        port=args.port,
        log_level=(args.log_level or "info").lower(),
    )


if __name__ == "__main__":
    main()
