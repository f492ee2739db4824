"""Promoter CLI commands."""
