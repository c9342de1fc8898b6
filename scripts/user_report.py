#!/usr/bin/env python3
"""
User Report Script

Prints a user's analytics summary, open tasks and today's focus sessions.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database import get_user_by_email, list_sessions, list_tasks
from tracker.analytics import build_analytics
from utils.dates import local_midnight, now_utc


def show_report(email):
    """Show the report for the user registered under `email`."""
    user = get_user_by_email(email)
    if user is None:
        print(f"❌ No user registered with email {email}")
        return False

    now = now_utc()
    tasks = list_tasks(user['user_id'])
    sessions = list_sessions(user['user_id'])
    summary = build_analytics(tasks, sessions, now, streak=user['streak'])

    print(f"📊 Report for {user['name']} <{user['email']}>")
    print("=" * 40)
    print(f"Streak: {summary.streak} day(s)")
    print(f"Productivity score: {summary.productivity_score}%")
    print(f"Tasks: {summary.tasks_completed}/{summary.tasks_total} completed "
          f"({summary.today_completed} today)")
    print(f"Focus: {summary.focus_hours_total}h total, "
          f"{summary.today_focus_minutes}m today, {summary.week_focus_minutes}m this week")

    pending = [t for t in tasks if not t['completed']]
    if pending:
        print("\nOpen tasks:")
        for task in pending:
            print(f"  - [{task['priority']}] {task['title']}")

    today = local_midnight(now)
    todays = [s for s in sessions if s['date'] >= today]
    if todays:
        print("\nToday's sessions:")
        for session in todays:
            print(f"  - {session['task']}: {session['duration']}m")

    return True


def main():
    """Main function."""
    if len(sys.argv) < 2:
        print("💡 Usage: python scripts/user_report.py <email>")
        sys.exit(1)

    if not show_report(sys.argv[1]):
        sys.exit(1)


if __name__ == "__main__":
    main()
