"""Backing stores for external storage services."""
