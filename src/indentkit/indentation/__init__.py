"""Line indentation for code blocks: locating lines, policy and commands."""

from .command import IndentCodeBlockCommand, IndentDirection
from .locator import iter_block_lines, line_at, locate_lines
from .policy import can_indent, can_outdent, indent_edit, outdent_edit
from .whitespace import leading_whitespace, leading_whitespace_end

__all__ = [
    "IndentCodeBlockCommand",
    "IndentDirection",
    "can_indent",
    "can_outdent",
    "indent_edit",
    "iter_block_lines",
    "leading_whitespace",
    "leading_whitespace_end",
    "line_at",
    "locate_lines",
    "outdent_edit",
]
