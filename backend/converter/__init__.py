"""Batch image converter service."""
