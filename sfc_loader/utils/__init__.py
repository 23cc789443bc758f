"""Utility helpers for the sfc-loader CLI."""
