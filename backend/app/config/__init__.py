"""Configuration package for the portfolio valuation service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
