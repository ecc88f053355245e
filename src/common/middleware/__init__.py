"""Common middleware for Kinship."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
