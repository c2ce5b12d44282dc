"""Block data model produced by the scanner and held by the document store"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from mdblocks.core.utils.hashing import fnv1a_64


class BlockType(str, Enum):
    """Closed set of top-level markdown constructs recognised by the scanner"""
    paragraph = "paragraph"
    heading1 = "heading1"
    heading2 = "heading2"
    heading3 = "heading3"
    heading4 = "heading4"
    heading5 = "heading5"
    heading6 = "heading6"
    list = "list"
    blockquote = "blockquote"
    horizontal_rule = "horizontalRule"
    code_fence = "codeFence"
    table = "table"
    frontmatter = "frontmatter"

    @classmethod
    def heading(cls, level: int) -> "BlockType":
        """Return the heading type for level 1-6."""
        return cls(f"heading{level}")

    @property
    def level(self) -> Optional[int]:
        """Heading level (1-6); None for non-headings."""
        if self.value.startswith("heading"):
            return int(self.value[-1])
        return None


def count_lines(text: str) -> int:
    """Count lines the way an editor does: a trailing newline opens no new line."""
    if not text:
        return 0
    n = text.count("\n")
    return n if text.endswith("\n") else n + 1


def table_dimensions(markdown: str) -> tuple[int, int]:
    """Return (rows, cols) for a table block; cols from the first row's pipes."""
    header = markdown.split("\n", 1)[0]
    return count_lines(markdown), max(header.count("|") - 1, 1)


@dataclass
class Block:
    """A contiguous span of source lines classified as one markdown unit.

    Byte offsets are UTF-8 offsets into the buffer that was scanned and are not
    stable across re-scans. Derived fields are kept in step with ``markdown``
    through ``set_markdown``.
    """
    id:           int
    start_byte:   int
    end_byte:     int               # exclusive
    start_line:   int
    end_line:     int               # inclusive
    markdown:     str
    block_type:   BlockType
    content_hash: int = field(init=False)
    line_count:   int = field(init=False)
    row_count:    Optional[int] = field(default=None, init=False)    # tables only
    col_count:    Optional[int] = field(default=None, init=False)    # tables only

    def __post_init__(self) -> None:
        self._derive()

    def _derive(self) -> None:
        self.content_hash = fnv1a_64(self.markdown)
        self.line_count = count_lines(self.markdown)
        if self.block_type == BlockType.table:
            self.row_count, self.col_count = table_dimensions(self.markdown)
        else:
            self.row_count = self.col_count = None

    def set_markdown(self, markdown: str) -> None:
        """Replace the block text and recompute hash, line and table counts."""
        self.markdown = markdown
        self._derive()
