# prompt_registry/services/diffing.py
"""Line diff shown next to each version history entry.

Lines are paired by position, not aligned by content: an insertion in the
middle of a block shows every following line as changed. Reviewers read
these diffs next to short prompt edits, where that is good enough; a
smarter algorithm can replace ``line_diff`` without touching callers.
"""

NO_CHANGES = "(no changes)"


def line_diff(old_content: str, new_content: str) -> str:
    old_lines = old_content.split("\n")
    new_lines = new_content.split("\n")
    out: list[str] = []

    for i in range(max(len(old_lines), len(new_lines))):
        old_line = old_lines[i] if i < len(old_lines) else None
        new_line = new_lines[i] if i < len(new_lines) else None
        if old_line == new_line:
            continue
        if old_line is not None:
            out.append(f"- {old_line}")
        if new_line is not None:
            out.append(f"+ {new_line}")

    return "\n".join(out) if out else NO_CHANGES
