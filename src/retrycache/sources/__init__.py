"""Concrete producers that can be wrapped."""

from retrycache.sources.http import fetch_json, json_source

__all__ = ["fetch_json", "json_source"]
