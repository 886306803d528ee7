"""Domain layer for budgetwatch application.

Services are imported from their modules (e.g. ``budgetwatch.domain.spending``)
so that the database layer can import domain entities without pulling the
services, and with them the database layer, back in.
"""
