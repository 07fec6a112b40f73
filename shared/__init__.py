"""Shared helpers for Kubernetes access, ownership labels and observability."""
