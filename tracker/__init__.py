"""
Tracker Core

Pure productivity logic shared by the web app and the terminal runner:
- Focus timer state machine
- Streak calculation
- Analytics aggregation
"""
