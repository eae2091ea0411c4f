"""
Pure insight calculations over race cards, model scores and the market log.

Nothing in this package touches the database; inputs may be ORM rows or
plain mappings.
"""
