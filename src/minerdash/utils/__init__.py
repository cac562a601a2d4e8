"""Shared helpers for minerdash."""
