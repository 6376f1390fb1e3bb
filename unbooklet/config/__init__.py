"""Configuration helpers for unbooklet.

Expose `get_settings` as the canonical accessor for environment-driven
configuration.
"""

from .settings import PageCanvas, UnbookletSettings, get_settings


__all__ = ["PageCanvas", "UnbookletSettings", "get_settings"]
