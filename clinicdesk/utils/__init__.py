"""Utility functions."""

from clinicdesk.utils.time import ensure_utc, format_datetime, parse_datetime, utc_now

__all__ = ["utc_now", "ensure_utc", "format_datetime", "parse_datetime"]
