"""Line-level predicates used by the block scanner.

Each helper looks at a single physical line (trailing newline already
removed) and never at its neighbours; cross-line state lives in the scanner.
"""

import re
from typing import Optional

from mdblocks.core.models import BlockType


FENCE_CHARS = "`~"
RULE_CHARS = "-*_"
BULLET_PREFIXES = ("- ", "* ", "+ ")
ORDERED_ITEM_RE = re.compile(r"[0-9]+[.)] ")


def is_blank(line: str) -> bool:
    """True for empty or whitespace-only lines."""
    return not line.strip()


def is_table_line(line: str) -> bool:
    """True if the left-trimmed line starts with a pipe."""
    return line.lstrip().startswith("|")


def detect_fence_open(line: str) -> Optional[tuple[str, int]]:
    """Return (fence_char, run_length) if line opens a code fence, else None."""
    s = line.lstrip()
    if not s or s[0] not in FENCE_CHARS:
        return None
    ch = s[0]
    run = len(s) - len(s.lstrip(ch))
    return (ch, run) if run >= 3 else None


def is_fence_close(line: str, fence_char: str, min_len: int) -> bool:
    """True if line is a run of >= min_len fence_char followed only by whitespace."""
    s = line.lstrip()
    rest = s.lstrip(fence_char)
    return len(s) - len(rest) >= min_len and not rest.strip()


def is_horizontal_rule(line: str) -> bool:
    """Thematic break: 3+ of the same -, * or _ with any interleaved whitespace."""
    chars = [c for c in line if not c.isspace()]
    if len(chars) < 3 or chars[0] not in RULE_CHARS:
        return False
    return all(c == chars[0] for c in chars)


def heading_level(line: str) -> Optional[int]:
    """Return ATX heading level (1-6) if line starts with #'s then space or end."""
    s = line.lstrip()
    n = len(s) - len(s.lstrip("#"))
    if 1 <= n <= 6 and (len(s) == n or s[n] == " "):
        return n
    return None


def is_list_item(line: str) -> bool:
    """Bullet (-, *, +) or ordered (1. / 1)) list item marker."""
    s = line.lstrip()
    return s.startswith(BULLET_PREFIXES) or ORDERED_ITEM_RE.match(s) is not None


def classify_first_line(line: str) -> BlockType:
    """Classify a block by its opening line.

    Rules are checked before lists so that ``---``, ``***`` and ``* * *`` read
    as rules rather than bullets.
    """
    if is_horizontal_rule(line):
        return BlockType.horizontal_rule
    if (level := heading_level(line)) is not None:
        return BlockType.heading(level)
    if is_list_item(line):
        return BlockType.list
    if line.lstrip().startswith(">"):
        return BlockType.blockquote
    return BlockType.paragraph
