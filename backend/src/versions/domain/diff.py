"""Line-oriented comparison of two content snapshots.

``positional`` compares line ``i`` of the old text with line ``i`` of the new
one. An inserted or deleted line therefore shows up as a run of ``modified``
entries for every line after it. ``line_match`` aligns the two line
sequences first, so only the lines that actually changed are reported.
"""

import difflib
from dataclasses import dataclass
from enum import StrEnum


class ChangeType(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class DiffAlgorithm(StrEnum):
    POSITIONAL = "positional"
    LINE_MATCH = "line_match"


@dataclass(frozen=True)
class LineChange:
    type: ChangeType
    line_number: int
    content: str | None = None
    old_content: str | None = None
    new_content: str | None = None


def diff_lines(
    old: str, new: str, algorithm: DiffAlgorithm = DiffAlgorithm.POSITIONAL
) -> list[LineChange]:
    old_lines = old.split("\n")
    new_lines = new.split("\n")
    if algorithm == DiffAlgorithm.LINE_MATCH:
        return _line_match_diff(old_lines, new_lines)
    return _positional_diff(old_lines, new_lines)


def _positional_diff(old_lines: list[str], new_lines: list[str]) -> list[LineChange]:
    changes: list[LineChange] = []
    for i in range(max(len(old_lines), len(new_lines))):
        # A missing line and an empty line are the same thing here
        old_line = old_lines[i] if i < len(old_lines) else ""
        new_line = new_lines[i] if i < len(new_lines) else ""
        if old_line == new_line:
            continue
        changes.append(_classify(i + 1, old_line, new_line))
    return changes


def _classify(line_number: int, old_line: str, new_line: str) -> LineChange:
    if old_line and not new_line:
        return LineChange(ChangeType.REMOVED, line_number, content=old_line)
    if new_line and not old_line:
        return LineChange(ChangeType.ADDED, line_number, content=new_line)
    return LineChange(
        ChangeType.MODIFIED, line_number, old_content=old_line, new_content=new_line
    )


def _line_match_diff(old_lines: list[str], new_lines: list[str]) -> list[LineChange]:
    changes: list[LineChange] = []
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        if tag == "delete":
            changes.extend(
                LineChange(ChangeType.REMOVED, i + 1, content=old_lines[i]) for i in range(i1, i2)
            )
        elif tag == "insert":
            changes.extend(
                LineChange(ChangeType.ADDED, j + 1, content=new_lines[j]) for j in range(j1, j2)
            )
        else:
            paired = min(i2 - i1, j2 - j1)
            for k in range(paired):
                changes.append(
                    LineChange(
                        ChangeType.MODIFIED,
                        j1 + k + 1,
                        old_content=old_lines[i1 + k],
                        new_content=new_lines[j1 + k],
                    )
                )
            changes.extend(
                LineChange(ChangeType.REMOVED, i + 1, content=old_lines[i])
                for i in range(i1 + paired, i2)
            )
            changes.extend(
                LineChange(ChangeType.ADDED, j + 1, content=new_lines[j])
                for j in range(j1 + paired, j2)
            )
    return changes
