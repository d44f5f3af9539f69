"""
CLI layer for retrycache.

Entry point::

    retrycache --help
"""

from retrycache.cli.app import app

__all__ = ["app"]
