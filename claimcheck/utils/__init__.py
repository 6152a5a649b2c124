"""Utility modules for configuration, logging, dates, and AWS integration."""

from .response_formatter import extract_fenced_json

__all__ = [
    'extract_fenced_json'
]
