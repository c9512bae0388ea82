"""Nomad Trail - scenario generation API for text-based survival games."""

__version__ = "0.1.0"
