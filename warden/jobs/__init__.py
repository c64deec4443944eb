"""Standalone maintenance jobs."""
