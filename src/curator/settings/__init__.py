"""Application settings."""

from curator.settings.app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
