"""Domain layer for caixa application.

Entities and the aggregation engine (grouping, balances, dre, aging,
reconciliation) are pure; the services in this package wrap them around a
``caixa.database.Database``. Services are imported from their modules so
that the database layer can import entities without a cycle.
"""
