"""Recognise "remember ..." style memory commands in free text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from memsync.template.codec import ITEM_MARKER

SECTION_KEYWORDS: dict[str, list[str]] = {
    "User Information": [
        "name", "age", "location", "live", "address", "phone", "email", "birthday",
        "work", "job", "family", "spouse", "child", "children", "pet", "hobby",
        "hobbies", "interest", "interests", "education", "school", "university",
        "wife", "husband", "partner", "daughter", "son", "car", "vehicle", "house",
        "home", "founded", "company", "business",
    ],
    "General Response Style": [
        "response", "style", "tone", "voice", "formal", "informal", "casual",
        "professional", "friendly", "concise", "detailed", "respond", "emoji",
        "language", "prefer", "spelling", "format", "formatting", "brevity",
        "thorough", "currency", "structure",
    ],
    "Coding Preferences": [
        "code", "coding", "programming", "language", "framework", "library",
        "platform", "syntax", "style", "indent", "indentation", "comment",
        "documentation", "naming", "convention", "pattern", "architecture",
        "design", "test", "testing", "debug", "debugging", "editor", "ide",
        "terminal", "compiler", "interpreter", "svelte", "react", "angular",
        "vue", "node", "python", "java", "javascript", "typescript",
    ],
    "MCP": [
        "mcp", "file", "access", "permission", "gitignore", "credential", "api",
        "key", "secret", "token", "filesystem", "servemyapi", "serve", "server",
        "endpoint", "host",
    ],
}

DEFAULT_SECTION = "User Information"

# "add to Hobbies: tennis" names the section before the colon; without a colon
# only the first word is taken as the section ("add to Hobbies tennis").
_ADD_TO_SECTION = re.compile(r"use\s+myai\s+memory\s+to\s+add\s+to\s+(.+?)\s*:\s*(.+)", re.I | re.S)
_ADD_TO_WORD = re.compile(r"use\s+myai\s+memory\s+to\s+add\s+to\s+(\S+)\s+(.+)", re.I | re.S)
_UPDATE_MY = re.compile(r"update\s+my\s+(.+?)\s+to\s+include\s+that\s+(.+)", re.I | re.S)
_REMEMBER = [
    re.compile(r"use\s+myai\s+memory\s+to\s+remember\s+(?:that\s+)?(.+)", re.I | re.S),
    re.compile(r"remember\s+that\s+(.+)", re.I | re.S),
    re.compile(r"add\s+to\s+my\s+memory\s+that\s+(.+)", re.I | re.S),
]
_IS_STATEMENT = re.compile(r"^(?:my|i|we)\s+(.+?)\s+is\s+(.+)$", re.I)


@dataclass
class MemoryCommand:
    """A parsed command: which section to touch and what to put there."""

    section: str
    content: str


def _words(text: str) -> set[str]:
    return set(re.findall(r"[a-z]+", text.lower()))


def detect_section(content: str) -> str:
    """Pick the section whose keywords occur most often; ties keep the first."""
    words = _words(content)
    best, best_score = DEFAULT_SECTION, 0
    for section, keywords in SECTION_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in words)
        if score > best_score:
            best, best_score = section, score
    return best


def match_section_name(partial: str) -> str:
    """Map a loose section name ("response style") onto a known one."""
    lowered = partial.strip().lower()
    for section in SECTION_KEYWORDS:
        if section.lower() == lowered:
            return section
    for section in SECTION_KEYWORDS:
        if lowered in section.lower() or section.lower() in lowered:
            return section
    return " ".join(word.capitalize() for word in partial.split())


def format_content(content: str) -> str:
    """Turn "my X is Y" / "X: Y" into an item line; leave other text as is."""
    text = content.strip().rstrip(".")
    if text.startswith(ITEM_MARKER):
        return text

    statement = _IS_STATEMENT.match(text)
    if statement:
        key = statement.group(1).strip()
        return f"{ITEM_MARKER} {key[:1].upper()}{key[1:]}: {statement.group(2).strip()}"

    key, sep, value = text.partition(":")
    if sep and key.strip() and value.strip():
        return f"{ITEM_MARKER} {key.strip()}: {value.strip()}"

    return content.strip()


def parse_memory_command(command: str) -> MemoryCommand | None:
    """Return the section/content a command refers to, or None."""
    for pattern in (_ADD_TO_SECTION, _ADD_TO_WORD, _UPDATE_MY):
        match = pattern.search(command)
        if match:
            return MemoryCommand(
                section=match_section_name(match.group(1)),
                content=match.group(2).strip(),
            )

    for pattern in _REMEMBER:
        match = pattern.search(command)
        if match:
            content = match.group(1).strip()
            return MemoryCommand(section=detect_section(content), content=content)

    return None
