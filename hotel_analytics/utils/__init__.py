"""Utility helpers (paths, logging)."""
