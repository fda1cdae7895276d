"""Diff models describing a document overwrite"""

from __future__ import annotations

from pydantic import BaseModel


class DiffHunk(BaseModel):
    """One changed region between the snapshot and the new text"""

    start_line: int  # 1-indexed, in the snapshot
    end_line: int
    original_content: str
    new_content: str
    change_type: str  # "add", "modify", "delete"


class DiffResult(BaseModel):
    """What an overwrite of the active document changed"""

    file_path: str
    hunks: list[DiffHunk]
    unified_diff: str
    snapshot: str  # Document text before the overwrite

    @property
    def changed(self) -> bool:
        return bool(self.hunks)
