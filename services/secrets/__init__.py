"""Managed secrets HTTP service."""
