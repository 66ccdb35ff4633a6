"""Parsing of priority markers and tags out of todo text.

``"Buy milk !! #shop"`` -> text ``"Buy milk"``, priority 2, tags ``["shop"]``.
"""

from __future__ import annotations

from localvault.shared.constants import Priority


def extract_priority(text: str) -> int:
    for marker, level in Priority.MARKERS:
        if marker in text:
            return level
    return Priority.NONE


def extract_tags(text: str) -> list[str]:
    tags = []
    for word in text.split():
        if word.startswith(Priority.TAG_PREFIX):
            tag = word[len(Priority.TAG_PREFIX):]
            if tag:
                tags.append(tag)
    return tags


def clean_text(text: str) -> str:
    """Strip the first priority marker and every tag word."""
    for marker, _level in Priority.MARKERS:
        text = text.replace(marker, "", 1)
    words = [word for word in text.split() if not word.startswith(Priority.TAG_PREFIX)]
    return " ".join(words).strip()


def format_for_editing(text: str, priority: int, tags: list[str]) -> str:
    """Rebuild editable text from a parsed todo."""
    parts = [text]
    for marker, level in Priority.MARKERS:
        if priority == level:
            parts.append(marker)
            break
    parts.extend(f"{Priority.TAG_PREFIX}{tag}" for tag in tags)
    return " ".join(part for part in parts if part)
