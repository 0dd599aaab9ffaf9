"""Batch application of line edits with atomic rollback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from ..core.spans import LineEdit

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .document_model import Document

LOGGER = logging.getLogger(__name__)


class EditApplyError(RuntimeError):
    """Raised when a batch of edits cannot be applied cleanly."""

    def __init__(
        self,
        message: str,
        *,
        reason: str = "range_mismatch",
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.expected = expected
        self.actual = actual

    def details(self) -> dict[str, str | None]:
        return {
            "reason": self.reason,
            "expected": self.expected,
            "actual": self.actual,
        }


def apply_line_edits(document: "Document", edits: Sequence[LineEdit]) -> int:
    """Apply ``edits`` to ``document`` as a single batch and return how many ran.

    Edits run from the last document position to the first so the offsets of
    the remaining edits stay valid. Any failure rolls the whole batch back.
    """

    if not edits:
        return 0

    try:
        keyed = [(document.block_index(edit.block), edit) for edit in edits]
    except ValueError as exc:
        raise EditApplyError(str(exc), reason="detached_block") from exc
    keyed.sort(key=lambda item: (item[0], item[1].start, item[1].end))
    _ensure_non_overlapping(keyed)

    with document.batch() as writer:
        for _index, edit in reversed(keyed):
            writer.replace(
                edit.block,
                edit.start,
                edit.end,
                edit.replacement,
                expected=edit.match_text,
            )
    LOGGER.debug("Applied %d line edit(s) to document version %d", len(keyed), document.version_id)
    return len(keyed)


def _ensure_non_overlapping(keyed: Sequence[tuple[int, LineEdit]]) -> None:
    previous_block = -1
    previous_end = -1
    for block_index, edit in keyed:
        if block_index != previous_block:
            previous_block = block_index
            previous_end = -1
        if edit.start < previous_end:
            raise EditApplyError("Line edits may not overlap", reason="range_overlap")
        previous_end = max(previous_end, edit.end)


__all__ = ["EditApplyError", "apply_line_edits"]
