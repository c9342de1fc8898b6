#!/usr/bin/env python3
"""
Productivity Tracker - Main Entry Point

Runs the REST API, initializes the database, or runs a focus timer in the
terminal.

Usage:
    python main.py serve [--host HOST] [--port PORT] [--debug]
    python main.py init-db
    python main.py focus --email you@example.com [--minutes 25] [--task "Deep work"]
"""

import argparse
import logging
import sys

from config import settings


def main():
    parser = argparse.ArgumentParser(description="Productivity Tracker")
    subparsers = parser.add_subparsers(dest="command")

    # Web app specific arguments
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default=settings.HOST, help="Web app host")
    serve_parser.add_argument("--port", type=int, default=settings.PORT, help="Web app port")
    serve_parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    subparsers.add_parser("init-db", help="Create database tables")

    focus_parser = subparsers.add_parser("focus", help="Run a focus timer in the terminal")
    focus_parser.add_argument("--email", required=True, help="Registered user's email")
    focus_parser.add_argument("--minutes", default=str(settings.DEFAULT_FOCUS_MINUTES), help="Minutes (1-120)")
    focus_parser.add_argument("--task", default=None, help="What you are focusing on")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "init-db":
        from config.database import init_database
        init_database()
        return

    if args.command == "focus":
        from services.focus_runner import run_focus_session
        from tracker.errors import TrackerError
        from tracker.timer import parse_custom_minutes
        try:
            minutes = parse_custom_minutes(args.minutes)
            saved = run_focus_session(args.email, minutes=minutes, task=args.task)
        except TrackerError as e:
            print(f"❌ {e.message}")
            sys.exit(1)
        if saved:
            print(f"🎉 {saved['duration']} minute focus session complete!")
        return

    host = getattr(args, "host", settings.HOST)
    port = getattr(args, "port", settings.PORT)
    debug = getattr(args, "debug", False)

    from webapp.app import create_app
    app = create_app()
    print(f"🚀 Starting Productivity Tracker API...")
    print(f"📍 Server running at: http://{host}:{port}")
    print(f"🔧 Debug mode: {'ON' if debug else 'OFF'}")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
