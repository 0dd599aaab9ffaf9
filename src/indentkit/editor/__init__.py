"""Editor package containing the document model, markup helpers and commands."""

from importlib import import_module
from typing import Any

from . import document_model, markup

__all__ = ["document_model", "markup"]


def __getattr__(name: str) -> Any:
	if name in {"commands", "edits", "qt_actions"}:
		module = import_module(f"{__name__}.{name}")
		globals()[name] = module
		return module
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
