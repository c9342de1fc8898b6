#!/usr/bin/env python3
"""
Database Initialization Script

Run this script to create the tracker database tables.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database import init_database
from config.settings import DATABASE_URL
from tracker.errors import StorageError


def main():
    """Initialize the database."""
    print("🚀 Initializing Productivity Tracker Database...")
    print("=" * 50)

    try:
        init_database()
        print(f"✅ Database initialized successfully: {DATABASE_URL}")

        print("\n📊 Database Structure:")
        print("   - users: Accounts, settings and streaks")
        print("   - tasks: To-do items with priority and completion time")
        print("   - notes: Free-form notes")
        print("   - focus_sessions: Finished focus timer sessions")

    except StorageError as e:
        print(f"❌ Error initializing database: {e.__cause__ or e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
