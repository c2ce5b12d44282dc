"""Line diffs between a document and its canonical reassembled form"""

import difflib


def change_summary(old: str, new: str) -> dict[str, int]:
    """Return added/deleted/unchanged line counts between old and new."""
    matcher = difflib.SequenceMatcher(None, old.splitlines(), new.splitlines())
    counts = {"added": 0, "deleted": 0, "unchanged": 0}
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            counts["unchanged"] += i2 - i1
        if tag in ("replace", "delete"):
            counts["deleted"] += i2 - i1
        if tag in ("replace", "insert"):
            counts["added"] += j2 - j1
    return counts


def unified_diff(old: str, new: str, label: str = "document", context: int = 3) -> list[str]:
    """Unified diff lines from old (a/label) to new (b/label); empty if identical."""
    return list(difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=f"a/{label}",
        tofile=f"b/{label}",
        n=context,
    ))
