"""
Routeopt - Weekly model routing optimizer.

Recommends cheaper or better models for each task type routed by a SOUL.md
document, and applies the approved subset of those changes after a
per-item human review.
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
