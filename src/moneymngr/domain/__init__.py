"""Domain layer for moneymngr application.

Services are imported from their modules directly; this package does not
re-export them because the database layer imports ``domain.entities``.
"""
