"""Markdown codec for the myAI Memory document.

The dialect is line oriented:

    # myAI Memory

    # User Information
    ## Use this information if you need to reference them directly
    -~- Name: Alice
    -~- Location: London

Anything that does not match one of these shapes is skipped, so parsing
never raises. ``generate_template`` is the exact inverse of
``parse_template`` for documents it produced itself.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

BANNER = "# myAI Memory"
ITEM_MARKER = "-~-"
SECTION_PREFIX = "# "
DESCRIPTION_PREFIX = "## "


@dataclass
class Item:
    """A single key/value preference."""

    key: str
    value: str


@dataclass
class Section:
    """A titled group of preference items."""

    title: str
    description: str = ""
    items: list[Item] = field(default_factory=list)

    def get(self, key: str) -> Item | None:
        """Case-insensitive item lookup."""
        k = key.lower()
        for item in self.items:
            if item.key.lower() == k:
                return item
        return None


@dataclass
class MemoryDocument:
    """Ordered sections making up the whole memory."""

    sections: list[Section] = field(default_factory=list)

    def find(self, title: str) -> Section | None:
        """Case-insensitive section lookup."""
        index = self.index_of(title)
        return self.sections[index] if index >= 0 else None

    def index_of(self, title: str) -> int:
        t = title.strip().lower()
        for i, section in enumerate(self.sections):
            if section.title.lower() == t:
                return i
        return -1

    def titles(self) -> list[str]:
        return [s.title for s in self.sections]

    def copy(self) -> MemoryDocument:
        return copy.deepcopy(self)


def parse_template(text: str) -> MemoryDocument:
    """Parse markdown into a MemoryDocument. Malformed lines are dropped."""
    sections: list[Section] = []
    current: Section | None = None

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line == BANNER:
            continue

        if line.startswith(SECTION_PREFIX):
            title = line[len(SECTION_PREFIX) :].strip()
            if not title:
                continue
            current = Section(title=title)
            sections.append(current)
            continue

        if current is None:
            continue

        if line.startswith(DESCRIPTION_PREFIX):
            current.description = line[len(DESCRIPTION_PREFIX) :].strip()
        elif line.startswith(ITEM_MARKER):
            body = line[len(ITEM_MARKER) :].strip()
            colon = body.find(":")
            if colon > 0:
                current.items.append(
                    Item(key=body[:colon].strip(), value=body[colon + 1 :].strip())
                )

    return MemoryDocument(sections=sections)


def generate_section(section: Section) -> str:
    """Render one section block, without the trailing separator line."""
    lines = [f"{SECTION_PREFIX}{section.title}"]
    if section.description:
        lines.append(f"{DESCRIPTION_PREFIX}{section.description}")
    for item in section.items:
        lines.append(f"{ITEM_MARKER} {item.key}: {item.value}")
    return "\n".join(lines) + "\n"


def generate_template(document: MemoryDocument) -> str:
    """Render the whole document: banner, then each section and a blank line."""
    parts = [f"{BANNER}\n\n"]
    for section in document.sections:
        parts.append(generate_section(section))
        parts.append("\n")
    return "".join(parts)


def has_item_lines(text: str) -> bool:
    """True if any line of ``text`` starts with the item marker."""
    return any(line.strip().startswith(ITEM_MARKER) for line in text.splitlines())


def validate_template(document: object) -> bool:
    """Structural check: types, non-empty titles/keys, case-insensitive uniqueness."""
    sections = getattr(document, "sections", None)
    if not isinstance(sections, list):
        return False

    seen_titles: set[str] = set()
    for section in sections:
        title = getattr(section, "title", None)
        if not isinstance(title, str) or not title.strip():
            return False
        if title.lower() in seen_titles:
            return False
        seen_titles.add(title.lower())

        if not isinstance(getattr(section, "description", None), str):
            return False

        items = getattr(section, "items", None)
        if not isinstance(items, list):
            return False

        seen_keys: set[str] = set()
        for item in items:
            key = getattr(item, "key", None)
            if not isinstance(key, str) or not key.strip():
                return False
            if key.lower() in seen_keys:
                return False
            seen_keys.add(key.lower())
            if not isinstance(getattr(item, "value", None), str):
                return False

    return True
