"""
Static routing catalog.

Provides the immutable RoutingTables passed into the parser, rewriter and
recommendation engine.
"""

from routeopt.core.catalog.tables import DEFAULT_QUALITY, RoutingTables, load_tables

__all__ = [
    "DEFAULT_QUALITY",
    "RoutingTables",
    "load_tables",
]
