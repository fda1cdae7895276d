"""
Artifact Extractor - Turn free-text model replies into code artifacts

Two modes:

* single block: the first fenced block of a reply (fix results). A reply
  without a fence, or with an unterminated one, comes back verbatim.
* multi file: every "path line directly followed by a fenced block" pair
  (chat-driven generation). A path-like line that is not immediately
  followed by a fence is treated as prose and skipped.

This is deliberately not a Markdown parser. Nothing here raises on odd input.
"""

from __future__ import annotations

import re

from models.artifact import Artifact, ArtifactKind, ExtractionResult

FENCE = "```"

INTENT_VERBS = ("create", "generate", "build", "make", "write", "develop")

_LEADING_MARKER_RE = re.compile(r"^(?:#+|[-*+]|\d+[.)])\s+")
_LABEL_RE = re.compile(r"^(?:file(?:name)?|path)\s*:\s*", re.IGNORECASE)
_DECORATION = "*`'\" \t:"


def extract_code_block(text: str) -> str:
    """Return the body of the first fenced block, or ``text`` unchanged"""
    if not text:
        return text

    opening = text.find(FENCE)
    if opening < 0:
        return text

    # The info string ("```python") belongs to the opening line
    line_end = text.find("\n", opening)
    if line_end < 0:
        return text
    start = line_end + 1

    closing = text.find(FENCE, start)
    if closing < 0:
        return text

    return text[start:closing].strip()


def extract_single(text: str) -> ExtractionResult:
    """Single-block extraction wrapped as one inline artifact"""
    code = extract_code_block(text)
    found = code != text
    return ExtractionResult(
        artifacts=[Artifact(content=code or "", kind=ArtifactKind.INLINE)],
        any_found=found,
    )


def is_path_line(line: str) -> bool:
    """Cheap signal for a line announcing a file path"""
    return "." in line and ("/" in line or "\\" in line)


def is_fence_line(line: str) -> bool:
    return line.lstrip().startswith(FENCE)


def clean_path(line: str) -> str:
    """Strip Markdown decoration around an announced path"""
    path = line.strip()
    path = _LEADING_MARKER_RE.sub("", path)
    path = _LABEL_RE.sub("", path.strip(_DECORATION))
    return path.strip(_DECORATION)


def extract_files(text: str) -> ExtractionResult:
    """Collect (path, content) pairs announced as path line + fenced block"""
    artifacts: list[Artifact] = []
    lines = (text or "").splitlines()
    total = len(lines)

    i = 0
    while i < total:
        line = lines[i]
        if not (is_path_line(line) and i + 1 < total and is_fence_line(lines[i + 1])):
            i += 1
            continue

        closing = _find_closing_fence(lines, i + 2)
        if closing is None:
            # Unterminated block: nothing after it can pair up either
            break

        path = clean_path(line)
        if path:
            artifacts.append(
                Artifact(
                    path=path,
                    content="\n".join(lines[i + 2 : closing]),
                    kind=ArtifactKind.FILE,
                )
            )
        i = closing + 1

    return ExtractionResult(artifacts=artifacts, any_found=bool(artifacts))


def _find_closing_fence(lines: list[str], start: int) -> int | None:
    for j in range(start, len(lines)):
        if is_fence_line(lines[j]):
            return j
    return None


def is_code_generation_request(message: str) -> bool:
    """Whether a chat message asks for code to be produced"""
    lowered = message.lower()
    return any(verb in lowered for verb in INTENT_VERBS)
