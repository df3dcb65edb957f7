"""
reminders/ - Scheduled Reminder Pipeline
========================================
Finds users whose credit card statement closes or is due soon, composes
their reminder text and delivers it with retry and error classification.
"""
