"""Line-level text diffs for stored explanation versions"""

import difflib


def line_change_counts(old: str, new: str) -> dict[str, int]:
    """Added/deleted/unchanged line counts between two texts."""
    counts = {"added": 0, "deleted": 0, "unchanged": 0}
    matcher = difflib.SequenceMatcher(None, old.splitlines(), new.splitlines(), autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            counts["unchanged"] += i2 - i1
            continue
        counts["deleted"] += i2 - i1
        counts["added"] += j2 - j1
    return counts


def unified_diff(
    old: str,
    new: str,
    from_label: str = "a",
    to_label: str = "b",
    context: int = 3,
    ) -> list[str]:
    """Unified diff lines (newline-terminated) from old to new; empty if identical."""
    return list(difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=from_label,
        tofile=to_label,
        n=context,
    ))
