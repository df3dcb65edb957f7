"""
handlers/ - Presentation Layer
==============================
Telegram update handlers. They resolve the user, hand the text to the
parser and executor (or to the chart/export services) and send the reply.
No business logic lives here.
"""
