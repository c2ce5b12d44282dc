"""Unit tests for core/scan.py"""

import pytest

from mdblocks.core.models import BlockType
from mdblocks.core.scan import iter_lines, reassemble, scan
from mdblocks.core.utils.hashing import fnv1a_64


def _types(text: str) -> list[BlockType]:
    return [b.block_type for b in scan(text)]


def _markdown(text: str) -> list[str]:
    return [b.markdown for b in scan(text)]


# --- basics ---

def test_scan_empty():
    """The empty string scans to no blocks."""
    assert scan("") == []


def test_scan_only_blank_lines():
    """A buffer of blank lines produces no blocks."""
    assert scan("\n\n   \n\n") == []


def test_scan_single_line_no_newline():
    """Text without a trailing newline still yields its final block."""
    blocks = scan("Hello")
    assert len(blocks) == 1
    b = blocks[0]
    assert b.block_type == BlockType.paragraph
    assert b.markdown == "Hello"
    assert (b.start_byte, b.end_byte) == (0, 5)
    assert (b.start_line, b.end_line) == (0, 0)


def test_scan_blank_runs_collapse():
    """Several consecutive blank lines act as a single separator."""
    blocks = scan("A\n\n\n\nB\n")
    assert [b.markdown for b in blocks] == ["A", "B"]
    assert blocks[1].start_line == 4


def test_scan_whitespace_only_line_separates():
    """A line of spaces is blank and splits blocks."""
    assert _markdown("A\n   \nB") == ["A", "B"]


def test_scan_ids_sequential(sample_md):
    """Block ids are 0..n in document order."""
    blocks = scan(sample_md)
    assert [b.id for b in blocks] == list(range(len(blocks)))


def test_scan_sample_document(sample_md):
    """A mixed document is split into the expected typed blocks."""
    blocks = scan(sample_md)
    assert [b.block_type for b in blocks] == [
        BlockType.heading1,
        BlockType.paragraph,
        BlockType.heading2,
        BlockType.list,
        BlockType.code_fence,
        BlockType.horizontal_rule,
        BlockType.paragraph,
    ]
    para = blocks[1]
    assert para.markdown == "A paragraph with **bold** text\nthat wraps onto a second line."
    assert (para.start_line, para.end_line) == (2, 3)
    assert para.line_count == 2


def test_scan_hash_matches_markdown(sample_md):
    """content_hash is the FNV-1a hash of each block's markdown."""
    for b in scan(sample_md):
        assert b.content_hash == fnv1a_64(b.markdown)


# --- frontmatter ---

def test_scan_frontmatter_heading_body():
    """Frontmatter, heading and paragraph come out in order with correct spans."""
    blocks = scan("---\ntitle: T\n---\n\n# Heading\n\nBody\n")
    assert [b.block_type for b in blocks] == [
        BlockType.frontmatter, BlockType.heading1, BlockType.paragraph,
    ]
    fm, heading, body = blocks
    assert fm.markdown == "---\ntitle: T\n---"
    assert (fm.start_line, fm.end_line) == (0, 2)
    assert (fm.start_byte, fm.end_byte) == (0, 17)
    assert (heading.start_byte, heading.end_byte) == (18, 28)
    assert heading.start_line == 4
    assert (body.start_byte, body.end_byte) == (29, 34)


def test_scan_frontmatter_keeps_blank_lines(sample_fm_md):
    """Blank lines inside frontmatter do not split it."""
    blocks = scan("---\na: 1\n\nb: 2\n---\n\nText\n")
    assert blocks[0].block_type == BlockType.frontmatter
    assert blocks[0].markdown == "---\na: 1\n\nb: 2\n---"
    assert _types(sample_fm_md) == [BlockType.frontmatter, BlockType.heading1, BlockType.paragraph]


def test_scan_frontmatter_dots_close():
    """`...` also closes frontmatter and the next line starts a new block."""
    blocks = scan("---\na: 1\n...\nText\n")
    assert [b.markdown for b in blocks] == ["---\na: 1\n...", "Text"]
    assert blocks[1].block_type == BlockType.paragraph


def test_scan_frontmatter_only_on_first_line():
    """A later `---` is a horizontal rule, not frontmatter."""
    assert _types("Intro\n\n---\n\ntitle: T\n") == [
        BlockType.paragraph, BlockType.horizontal_rule, BlockType.paragraph,
    ]


def test_scan_unclosed_frontmatter_runs_to_end():
    """Unterminated frontmatter absorbs the rest of the buffer."""
    blocks = scan("---\nA\n\nB\n\n")
    assert len(blocks) == 1
    assert blocks[0].block_type == BlockType.frontmatter
    assert blocks[0].markdown == "---\nA\n\nB"
    assert blocks[0].end_line == 3


# --- code fences ---

def test_scan_fence_with_blank_lines_is_one_block():
    """Blank lines inside an open fence never split it."""
    text = "Intro\n\n```python\ndef f():\n\n    return 1\n```\n\nAfter\n"
    blocks = scan(text)
    assert [b.block_type for b in blocks] == [
        BlockType.paragraph, BlockType.code_fence, BlockType.paragraph,
    ]
    assert blocks[1].markdown == "```python\ndef f():\n\n    return 1\n```"
    assert (blocks[1].start_line, blocks[1].end_line) == (2, 6)


def test_scan_tilde_fence_ignores_backticks():
    """A tilde fence is only closed by tildes."""
    blocks = scan("~~~\n```\n\nx\n~~~\n\ny\n")
    assert [b.markdown for b in blocks] == ["~~~\n```\n\nx\n~~~", "y"]


def test_scan_fence_close_needs_opening_length():
    """A shorter run does not close a longer opening fence."""
    blocks = scan("````\ncode\n```\n\nstill code\n````\n")
    assert len(blocks) == 1
    assert blocks[0].block_type == BlockType.code_fence


def test_scan_fence_close_rejects_trailing_text():
    """A closing run followed by text does not close the fence."""
    blocks = scan("```\na\n``` not\n\nb\n```\n")
    assert len(blocks) == 1


def test_scan_unclosed_fence_drops_trailing_blanks():
    """An unterminated fence runs to the end without trailing blank lines."""
    blocks = scan("```\ncode\n\n\n")
    assert len(blocks) == 1
    assert blocks[0].markdown == "```\ncode"
    assert blocks[0].end_line == 1


def test_scan_fence_opened_inside_paragraph():
    """A fence opened mid-paragraph keeps the paragraph together across blank lines."""
    blocks = scan("Text\n```\n\ncode\n```\n\nNext\n")
    assert [b.block_type for b in blocks] == [BlockType.paragraph, BlockType.paragraph]
    assert blocks[0].markdown == "Text\n```\n\ncode\n```"


# --- tables ---

def test_scan_table_absorbs_blank_lines():
    """A blank line between table rows does not end the table."""
    text = "| a | b |\n|---|---|\n\n| 1 | 2 |\n\nNext para\n"
    blocks = scan(text)
    assert [b.block_type for b in blocks] == [BlockType.table, BlockType.paragraph]
    table = blocks[0]
    assert table.markdown == "| a | b |\n|---|---|\n\n| 1 | 2 |"
    assert (table.start_line, table.end_line) == (0, 3)
    assert table.row_count == 4
    assert table.col_count == 2
    assert blocks[1].start_line == 5


def test_scan_table_ends_at_text_line():
    """A non-blank, non-table line ends the table and starts a new block."""
    blocks = scan("| a |\nText\n")
    assert [b.block_type for b in blocks] == [BlockType.table, BlockType.paragraph]
    assert blocks[0].end_line == 0
    assert blocks[1].start_line == 1


def test_scan_table_terminator_is_classified():
    """The line that ends a table is classified like any block opener."""
    assert _types("| a |\n# Next\n") == [BlockType.table, BlockType.heading1]


def test_scan_paragraph_becomes_table():
    """A table row directly under a caption line turns the block into a table."""
    blocks = scan("Caption\n| a | b | c |\n")
    assert len(blocks) == 1
    assert blocks[0].block_type == BlockType.table
    assert blocks[0].col_count == 1


def test_scan_table_then_fence():
    """A fence opener right after a table ends the table."""
    blocks = scan("| a |\n```\nx\n```\n")
    assert [b.markdown for b in blocks] == ["| a |", "```\nx\n```"]
    assert blocks[1].block_type == BlockType.code_fence


def test_scan_table_no_pipes_beyond_edge():
    """Column count is floored at one."""
    blocks = scan("|only\n")
    assert blocks[0].col_count == 1
    assert blocks[0].row_count == 1


# --- first-line classification ---

@pytest.mark.parametrize("line,expected", [
    ("# Title",            BlockType.heading1),
    ("###### Six",         BlockType.heading6),
    ("##",                 BlockType.heading2),
    ("####### Seven",      BlockType.paragraph),
    ("#NoSpace",           BlockType.paragraph),
    ("---",                BlockType.frontmatter),
    ("***",                BlockType.horizontal_rule),
    ("_ _ _",              BlockType.horizontal_rule),
    ("* * *",              BlockType.horizontal_rule),
    ("- item",             BlockType.list),
    ("* item",             BlockType.list),
    ("+ item",             BlockType.list),
    ("12. twelve",         BlockType.list),
    ("3) three",           BlockType.list),
    ("1.5 is a number",    BlockType.paragraph),
    ("> quoted",           BlockType.blockquote),
    ("plain text",         BlockType.paragraph),
])
def test_scan_first_line_classification(line, expected):
    """The opening line decides the block type."""
    assert _types(line + "\n") == [expected]


def test_scan_rule_after_first_line():
    """`---` not on the first line reads as a rule rather than a list."""
    assert _types("Para\n\n---\n\n- - -\n\n- item\n") == [
        BlockType.paragraph, BlockType.horizontal_rule,
        BlockType.horizontal_rule, BlockType.list,
    ]


def test_scan_classification_not_revisited():
    """Lines appended to a block do not change its type."""
    blocks = scan("# Title\n- not a list\n> nor a quote\n")
    assert len(blocks) == 1
    assert blocks[0].block_type == BlockType.heading1
    assert blocks[0].line_count == 3


# --- byte/line accounting ---

def test_scan_crlf_lines():
    """Carriage returns are stripped from markdown but counted in byte spans."""
    blocks = scan("A\r\nB\r\n\r\nC\r\n")
    assert [b.markdown for b in blocks] == ["A\nB", "C"]
    assert (blocks[0].start_byte, blocks[0].end_byte) == (0, 6)
    assert (blocks[1].start_byte, blocks[1].end_byte) == (8, 11)


def test_scan_utf8_byte_offsets():
    """Byte spans count UTF-8 bytes, not characters."""
    blocks = scan("é\n\nb")
    assert (blocks[0].start_byte, blocks[0].end_byte) == (0, 3)
    assert (blocks[1].start_byte, blocks[1].end_byte) == (4, 5)


def test_iter_lines_splits_on_newline_only():
    """Form feeds and lone carriage returns do not start new lines."""
    assert list(iter_lines("a\x0cb\rc\nd")) == ["a\x0cb\rc\n", "d"]


# --- reassemble ---

def test_reassemble_empty():
    assert reassemble([]) == ""


def test_reassemble_joins_with_one_blank_line():
    """Blocks are separated by exactly one blank line with a single trailing newline."""
    assert reassemble(scan("A\n\n\n\nB")) == "A\n\nB\n"


@pytest.mark.parametrize("text", [
    "",
    "Hello",
    "A\n\n\n\nB\n",
    "\n\n\nLeading blanks\n\n\n",
    "---\ntitle: T\n---\n\n\n# Heading\n\nBody\n",
    "| a | b |\n|---|---|\n\n| 1 | 2 |\n\n\nNext para\n",
    "```\na\n\n\n\nb\n```\n\n\n\nc",
    "Caption\n| a |\n\n\n| b |\nAfter\n",
    "# Title\n\n- one\n- two\n\n\n> quote\n\n***\n",
])
def test_reassemble_is_fixed_point(text):
    """reassemble(scan(T)) is stable under a second scan/reassemble pass."""
    once = reassemble(scan(text))
    assert reassemble(scan(once)) == once
    if once:
        assert once.endswith("\n") and not once.endswith("\n\n")


def test_reassemble_collapses_blank_runs(sample_md):
    """Outside stateful blocks no run of two or more blank lines survives."""
    out = reassemble(scan("Para one\n\n\n\n# H\n\n\n- x\n"))
    assert out == "Para one\n\n# H\n\n- x\n"
    assert reassemble(scan(sample_md)) == sample_md
