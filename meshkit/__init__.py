"""Helpers for Kubernetes component generation, version sorting, templates and repository walking."""

__version__ = "0.1.0"