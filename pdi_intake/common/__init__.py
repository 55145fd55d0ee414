"""Shared clients used across the intake services."""

from .remote_functions import RemoteFunctionClient

__all__ = ["RemoteFunctionClient"]
