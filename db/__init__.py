"""
db/ - Persistence
=================
PostgreSQL pool, schema bootstrap (users, cards, transactions, installment
plans, learned patterns, semantic cache) and the retention job.
"""
