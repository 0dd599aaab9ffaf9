"""Optional PySide6 wiring: one ``QAction`` per registered command."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .commands import CommandRegistry

LOGGER = logging.getLogger(__name__)


def install_qt_actions(widget: Any, registry: CommandRegistry) -> dict[str, Any]:
    """Attach the registry's commands to ``widget`` as shortcut-bearing actions.

    Returns the created ``QAction`` objects keyed by command name, or an empty
    mapping when PySide6 is not installed.
    """

    try:
        from PySide6.QtCore import Qt
        from PySide6.QtGui import QAction
    except ImportError:
        LOGGER.debug("PySide6 unavailable; skipping Qt action installation")
        return {}

    qt_actions: dict[str, Any] = {}
    for name, action in registry.actions().items():
        qt_action = QAction(action.label, widget)
        if action.shortcut:
            qt_action.setShortcut(action.shortcut)  # type: ignore[arg-type]
            qt_action.setShortcutContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        qt_action.triggered.connect(action.trigger)  # type: ignore[attr-defined]
        widget.addAction(qt_action)
        qt_actions[name] = qt_action
    refresh_qt_actions(qt_actions, registry)
    return qt_actions


def refresh_qt_actions(qt_actions: Mapping[str, Any], registry: CommandRegistry) -> None:
    """Sync each action's enabled state with its command; call after selection changes."""

    for name, qt_action in qt_actions.items():
        if name in registry:
            qt_action.setEnabled(registry.get(name).is_enabled)


__all__ = ["install_qt_actions", "refresh_qt_actions"]
