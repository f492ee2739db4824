"""Promoter - development to production promotion pipeline."""

__version__ = "1.0.0"
