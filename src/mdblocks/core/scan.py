"""Markdown block scanner: split a buffer into top-level typed blocks.

A single left-to-right pass over physical lines. Blank lines separate blocks
except inside the stateful constructs, which are tracked as an explicit lexer
mode:

    NORMAL          between or inside ordinary blocks
    IN_FRONTMATTER  leading ``---`` ... ``---`` / ``...`` YAML header
    InFence         fenced code, remembers the fence char and opening run
    IN_TABLE        consecutive ``|`` lines, internal blank lines absorbed

The scanner produces no inline structure and no heights; see
``mdblocks.core.extract.classify`` for the per-line predicates.
"""

from dataclasses import dataclass, field
from typing import Iterator, Union

from mdblocks.core.extract.classify import (
    classify_first_line,
    detect_fence_open,
    is_blank,
    is_fence_close,
    is_table_line,
)
from mdblocks.core.models import Block, BlockType


FRONTMATTER_OPEN = "---"
FRONTMATTER_CLOSE = ("---", "...")
BLOCK_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class Normal:
    pass


@dataclass(frozen=True)
class InFrontmatter:
    pass


@dataclass(frozen=True)
class InFence:
    char: str
    min_len: int


@dataclass(frozen=True)
class InTable:
    pass


LexMode = Union[Normal, InFrontmatter, InFence, InTable]

NORMAL = Normal()
IN_FRONTMATTER = InFrontmatter()
IN_TABLE = InTable()


@dataclass
class _Pending:
    """Lines of the block being accumulated plus its span bookkeeping."""
    lines:      list[str] = field(default_factory=list)
    block_type: BlockType = BlockType.paragraph
    start_byte: int = 0
    start_line: int = 0
    end_byte:   int = 0     # end of the last non-blank line
    end_line:   int = 0
    kept:       int = 0     # number of lines up to the last non-blank one

    def begin(self, byte_offset: int, line_index: int, block_type: BlockType) -> None:
        self.start_byte = byte_offset
        self.start_line = line_index
        self.block_type = block_type

    def append(self, line: str, line_index: int, end_byte: int) -> None:
        self.lines.append(line)
        if not is_blank(line):
            self.kept = len(self.lines)
            self.end_byte = end_byte
            self.end_line = line_index

    def flush(self, block_id: int) -> Block:
        """Emit the block (trailing blank lines dropped) and reset."""
        block = Block(
            id=block_id,
            start_byte=self.start_byte,
            end_byte=self.end_byte,
            start_line=self.start_line,
            end_line=self.end_line,
            markdown="\n".join(self.lines[:self.kept]),
            block_type=self.block_type,
        )
        self.lines.clear()
        self.kept = 0
        self.block_type = BlockType.paragraph
        return block


def iter_lines(content: str) -> Iterator[str]:
    """Yield physical lines split on \\n only, each keeping its newline."""
    start = 0
    while start < len(content):
        end = content.find("\n", start)
        end = len(content) if end == -1 else end + 1
        yield content[start:end]
        start = end


def scan(content: str) -> list[Block]:
    """Scan content and return its blocks in document order. Never fails."""
    blocks: list[Block] = []
    pending = _Pending()
    mode: LexMode = NORMAL
    byte_offset = 0

    for line_index, raw_line in enumerate(iter_lines(content)):
        line = raw_line.rstrip("\r\n")
        line_end = byte_offset + len(raw_line.encode("utf-8"))

        # --- frontmatter: only when the very first line is `---` ---
        if line_index == 0 and line == FRONTMATTER_OPEN:
            mode = IN_FRONTMATTER
            pending.begin(byte_offset, line_index, BlockType.frontmatter)
            pending.append(line, line_index, line_end)
            byte_offset = line_end
            continue

        if mode is IN_FRONTMATTER:
            pending.append(line, line_index, line_end)
            if line in FRONTMATTER_CLOSE:
                blocks.append(pending.flush(len(blocks)))
                mode = NORMAL
            byte_offset = line_end
            continue

        blank = is_blank(line)

        # --- table exit: first non-blank, non-table line ends the table ---
        if mode is IN_TABLE and not blank and not is_table_line(line):
            if pending.lines:
                blocks.append(pending.flush(len(blocks)))
            mode = NORMAL

        # --- fence tracking ---
        if isinstance(mode, InFence):
            if is_fence_close(line, mode.char, mode.min_len):
                mode = NORMAL
        elif mode is NORMAL and (fence := detect_fence_open(line)) is not None:
            mode = InFence(*fence)

        # --- block splitting ---
        if blank and mode is NORMAL:
            if pending.lines:
                blocks.append(pending.flush(len(blocks)))
        else:
            if not pending.lines:
                pending.begin(byte_offset, line_index, _opening_type(line, mode))
                if pending.block_type == BlockType.table:
                    mode = IN_TABLE
            elif mode is NORMAL and is_table_line(line):
                mode = IN_TABLE
                pending.block_type = BlockType.table
            pending.append(line, line_index, line_end)

        byte_offset = line_end

    if pending.lines:
        blocks.append(pending.flush(len(blocks)))
    return blocks


def _opening_type(line: str, mode: LexMode) -> BlockType:
    """Type of a block whose first line is line, given the mode after fence tracking."""
    if isinstance(mode, InFence):
        return BlockType.code_fence
    if is_table_line(line):
        return BlockType.table
    return classify_first_line(line)


def reassemble(blocks: list[Block]) -> str:
    """Join blocks with one blank line and end with a single newline."""
    if not blocks:
        return ""
    return BLOCK_SEPARATOR.join(b.markdown for b in blocks) + "\n"
