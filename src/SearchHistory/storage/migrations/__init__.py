"""Versioned migration files for the search history schema.

Each module in this package exposes a single ``MIGRATION`` constant of type
:class:`~SearchHistory.storage.migration.Migration`. Modules are discovered
and sorted by :func:`~SearchHistory.storage.migration.load_migrations`; file
names follow the ``vNNN_<description>.py`` convention.
"""
