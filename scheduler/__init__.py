"""
scheduler/ - Background Jobs
============================
Cron-style jobs: credit card reminders, recurring payment reminders and
generation, the weekly report and housekeeping.
"""
