"""
Workspace - Where extracted artifacts land

Collaborators:

* DocumentAccessor - the editor's active document (EditorDocument is the
  in-memory buffer the plugin pushes and reads back)
* FileSink - creates files (LocalWorkspace writes under a root directory)

WorkspaceApplier decides, per mode, which of the two an extraction result
goes to. Every apply reports one ApplyOutcome per artifact and a failing
artifact never stops its siblings.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Protocol

from models.artifact import ApplyOutcome, ExtractionResult
from models.assistant import AssistantMode
from services.diff_generator import DiffGenerator

FIX_APPLIED = "Fixes applied successfully."
FIX_FAILED = "Failed to apply fixes."

MAX_ANALYSIS_BYTES = 100 * 1024

LANGUAGE_BY_EXTENSION = {
    ".cs": "csharp",
    ".vb": "visualbasic",
    ".js": "javascript",
    ".ts": "typescript",
    ".html": "html",
    ".css": "css",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".h": "cpp",
    ".c": "c",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".sql": "sql",
    ".json": "json",
    ".xml": "xml",
    ".md": "markdown",
}

SKIP_DIRS = {".git", ".hg", ".svn", "__pycache__", "node_modules", ".venv", "venv", "bin", "obj"}


def language_for_path(path: str) -> str:
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower(), "plaintext")


def is_binary_or_large(content: str) -> bool:
    """Too big, or mostly control characters"""
    if len(content) > MAX_ANALYSIS_BYTES:
        return True
    control = sum(1 for c in content if ord(c) < 32 and c not in "\t\n\r")
    return control > len(content) * 0.1


class DocumentAccessor(Protocol):
    def get_content(self) -> tuple[str, str]: ...

    def replace_content(self, text: str) -> bool: ...

    def get_path(self) -> str: ...


class FileSink(Protocol):
    def create_file(self, path: str, content: str) -> bool: ...


class EditorDocument:
    """Active document buffer shared with the editor plugin"""

    def __init__(self):
        self.path = ""
        self.content = ""
        self.language = ""

    def open(self, path: str, content: str, language: str | None = None) -> None:
        self.path = path
        self.content = content
        self.language = language or language_for_path(path)

    def close(self) -> None:
        self.path = self.content = self.language = ""

    def get_content(self) -> tuple[str, str]:
        if not self.path:
            return "", ""
        return self.content, self.language

    def replace_content(self, text: str) -> bool:
        if not self.path:
            return False
        self.content = text
        return True

    def get_path(self) -> str:
        return self.path


class LocalWorkspace:
    """Files on disk under a single root directory"""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Path | None:
        """Absolute location for a relative path, or None if it would leave the root"""
        candidate = Path(path.replace("\\", "/"))
        if candidate.is_absolute() or candidate.drive:
            return None
        target = (self.root / candidate).resolve()
        if target != self.root and self.root not in target.parents:
            return None
        return target

    def create_file(self, path: str, content: str) -> bool:
        target = self.resolve(path)
        if target is None:
            print(f"[LocalWorkspace] Refusing path outside workspace: {path}")
            return False
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            print(f"[LocalWorkspace] Error writing {path}: {e}")
            return False
        print(f"[LocalWorkspace] Wrote {target}")
        return True

    def iter_source_files(self) -> Iterator[tuple[str, str]]:
        """(relative path, text) for every readable file with a known language"""
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for name in sorted(filenames):
                full = Path(dirpath) / name
                if language_for_path(name) == "plaintext":
                    continue
                try:
                    text = full.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError):
                    continue
                yield full.relative_to(self.root).as_posix(), text


class WorkspaceApplier:
    """Route an extraction result to the active document or the file sink"""

    def __init__(self, document: DocumentAccessor, files: FileSink, diff_generator: DiffGenerator | None = None):
        self.document = document
        self.files = files
        self.diff_generator = diff_generator or DiffGenerator()

    def apply(self, mode: AssistantMode, result: ExtractionResult) -> list[ApplyOutcome]:
        if mode == AssistantMode.FIX:
            inline = result.inline
            if inline is None:
                return []
            return [self.overwrite_document(inline.content)]
        if mode == AssistantMode.GENERATE:
            return self.create_files(result)
        return []

    def overwrite_document(self, text: str) -> ApplyOutcome:
        """Full replace of the active document; the prior text is kept in the diff"""
        path = self.document.get_path()
        snapshot, _ = self.document.get_content()
        try:
            success = self.document.replace_content(text)
        except Exception as e:
            print(f"[WorkspaceApplier] Document replace raised: {e}")
            success = False

        if not success:
            return ApplyOutcome(path=path or None, success=False, message=FIX_FAILED)

        diff = self.diff_generator.generate_diff(snapshot, text, path)
        print(f"[WorkspaceApplier] {self.diff_generator.summarize(diff)}")
        return ApplyOutcome(path=path, success=True, message=FIX_APPLIED, diff=diff)

    def create_files(self, result: ExtractionResult) -> list[ApplyOutcome]:
        outcomes = []
        for artifact in result.files:
            try:
                success = self.files.create_file(artifact.path, artifact.content)
            except Exception as e:
                print(f"[WorkspaceApplier] Creating {artifact.path} raised: {e}")
                success = False

            message = f"Created file: {artifact.path}" if success else f"Failed to create file: {artifact.path}"
            outcomes.append(ApplyOutcome(path=artifact.path, success=success, message=message))
        return outcomes
