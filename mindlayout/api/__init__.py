"""Public layout API."""

from .engine import HTTP_STATUS, LayoutEngine, LayoutResult

__all__ = ["HTTP_STATUS", "LayoutEngine", "LayoutResult"]
