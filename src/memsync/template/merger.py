"""Apply a partial update to one section of a MemoryDocument.

Updates arrive either as a markdown fragment (``-~- Key: Value`` lines, an
optional ``## description``) or as free text, which goes through the
extractor. Items are merged key by key:

- keys are compared case-insensitively, the first-seen casing is kept
- updated values stay in place, new keys are appended
- items the update does not mention are left alone
"""

from __future__ import annotations

import logging

from memsync.errors import MergeError
from memsync.template.codec import (
    BANNER,
    Item,
    MemoryDocument,
    Section,
    has_item_lines,
    parse_template,
)
from memsync.template.extractor import NaturalLanguageExtractor

logger = logging.getLogger(__name__)

FALLBACK_KEY = "Info"


def merge_items(existing: list[Item], incoming: list[Item]) -> list[Item]:
    """Merge ``incoming`` into ``existing`` and return a new list."""
    merged: dict[str, Item] = {}
    for item in [*existing, *incoming]:
        k = item.key.lower()
        if k in merged:
            merged[k] = Item(merged[k].key, item.value)
        else:
            merged[k] = Item(item.key, item.value)
    return list(merged.values())


class SectionMerger:
    """Turn raw section content into items and fold them into a document."""

    def __init__(self, extractor: NaturalLanguageExtractor | None = None) -> None:
        self.extractor = extractor or NaturalLanguageExtractor()

    def parse_fragment(self, title: str, raw_content: str) -> Section:
        """Build the incoming section for ``title`` from ``raw_content``."""
        title = title.strip()
        if not title or "\n" in title:
            raise MergeError(f"Invalid section title: {title!r}")

        if has_item_lines(raw_content):
            fragment = raw_content
        else:
            items = self.extractor.extract_items(raw_content)
            if not items:
                items = [Item(FALLBACK_KEY, " ".join(raw_content.split()))]
            fragment = "\n".join(f"-~- {item.key}: {item.value}" for item in items)

        parsed = parse_template(f"{BANNER}\n\n# {title}\n{fragment}")
        if not parsed.sections:
            raise MergeError(f"Section content for '{title}' could not be parsed")
        if len(parsed.sections) > 1:
            raise MergeError(
                f"Section content for '{title}' opens other sections: "
                f"{parsed.titles()[1:]}"
            )

        section = parsed.sections[0]
        if section.title != title:
            raise MergeError(f"Parsed section title '{section.title}' does not match '{title}'")
        return section

    def merge_section(self, document: MemoryDocument, title: str, raw_content: str) -> MemoryDocument:
        """Return a new document with ``raw_content`` merged into section ``title``.

        The input document is never modified, so a caller that fails to
        persist the result still holds the pre-merge state.
        """
        incoming = self.parse_fragment(title, raw_content)
        result = document.copy()
        index = result.index_of(incoming.title)

        if index < 0:
            incoming.items = merge_items([], incoming.items)
            result.sections.append(incoming)
            logger.info("Added section '%s' (%d items)", incoming.title, len(incoming.items))
            return result

        current = result.sections[index]
        current.items = merge_items(current.items, incoming.items)
        if incoming.description:
            current.description = incoming.description
        logger.info("Merged %d items into section '%s'", len(incoming.items), current.title)
        return result
