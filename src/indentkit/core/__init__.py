"""Core value types shared by the editor and indentation packages."""

from .spans import LineEdit, LineSpan

__all__ = ["LineEdit", "LineSpan"]
