"""
Diff Generator Service - Describe what a fix overwrite changed
"""

from __future__ import annotations

from difflib import SequenceMatcher, unified_diff

from models.diff import DiffHunk, DiffResult


class DiffGenerator:
    """Compare a document snapshot with the text that replaced it"""

    def generate_diff(
        self,
        snapshot: str,
        new_content: str,
        file_path: str,
    ) -> DiffResult:
        original_lines = _as_lines(snapshot)
        new_lines = _as_lines(new_content)

        unified = unified_diff(
            original_lines,
            new_lines,
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
        )

        return DiffResult(
            file_path=file_path,
            hunks=self._extract_hunks(original_lines, new_lines),
            unified_diff="".join(unified),
            snapshot=snapshot,
        )

    def _extract_hunks(self, original: list[str], modified: list[str]) -> list[DiffHunk]:
        matcher = SequenceMatcher(None, original, modified)
        hunks = []

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                continue

            change_type = {"insert": "add", "delete": "delete"}.get(tag, "modify")
            hunks.append(
                DiffHunk(
                    start_line=i1 + 1,
                    end_line=i2,
                    original_content="".join(original[i1:i2]),
                    new_content="".join(modified[j1:j2]),
                    change_type=change_type,
                )
            )

        return hunks

    def summarize(self, diff: DiffResult) -> str:
        """One-line summary suitable for a status message"""
        if not diff.changed:
            return f"{diff.file_path}: no changes"
        added = removed = 0
        for hunk in diff.hunks:
            added += len(hunk.new_content.splitlines())
            removed += len(hunk.original_content.splitlines())
        return f"{diff.file_path}: {len(diff.hunks)} hunk(s), +{added} -{removed}"


def _as_lines(text: str) -> list[str]:
    # unified_diff needs a trailing newline on every line to render cleanly
    lines = text.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    return lines
