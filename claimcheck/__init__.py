"""Claim document extraction and photo verification service."""

__version__ = "0.1.0"
