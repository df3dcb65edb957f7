"""
localization/en.py
------------------
English texts.
"""

CODE = "en"

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

MONTHS_SHORT = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# ── Statement closing reminder ────────────────────────────
STATEMENT_GREETING = "Hello! 👋"
STATEMENT_CLOSING_IN = "Your *{payment_method}* statement closes in {days} days ({date})."
STATEMENT_PERIOD = "📅 Current period: {start} - {end}"
STATEMENT_TOTAL = "💳 Total so far: {amount}"
STATEMENT_BUDGET = "📊 Budget: {budget} ({percentage}% used)"
STATEMENT_REMAINING = "You have {amount} remaining for your monthly budget."
STATEMENT_EXCEEDED = "You are {amount} over budget for this month."
STATEMENT_CTA = 'For details, type "statement summary" or access the app.'

# ── Credit card payment reminder ──────────────────────────
PAYMENT_TITLE = "💳 Reminder: Credit card payment"
PAYMENT_DUE_IN = "Due in {days} days ({date})"
PAYMENT_AMOUNT = "💰 Amount: {amount}"
PAYMENT_CARD = "{name} card"
PAYMENT_PERIOD = "Period: {start} - {end}"
PAYMENT_FOOTER = "Don't forget to make your payment! 😊"
