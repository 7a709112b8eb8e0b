"""Heuristic free-text → key/value extraction.

Not an NLP engine: a fixed table of sentence shapes per category. Every
pattern runs against the input, each category counts its hits, and the
category with the most hits wins. Ties go to the category declared first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from memsync.template.codec import Item

logger = logging.getLogger(__name__)

PERSONAL = "User Information"
RESPONSE_STYLE = "General Response Style"
PROFESSIONAL = "Professional Experience"

# Clause terminator shared by most patterns: period, comma or end of text.
_END = r"(?:\.|,|$)"


@dataclass(frozen=True)
class Pattern:
    regex: re.Pattern[str]
    key: str
    default: str = ""

    def apply(self, text: str) -> str:
        match = self.regex.search(text)
        if not match:
            return ""
        value = (match.group(1) or "").strip()
        return value or self.default


def _p(expr: str, key: str, default: str = "") -> Pattern:
    return Pattern(re.compile(expr, re.IGNORECASE), key, default)


CATEGORIES: dict[str, list[Pattern]] = {
    PERSONAL: [
        _p(rf"my name is\s+(.+?){_END}", "Name"),
        _p(rf"I(?:'m| am) called\s+(.+?){_END}", "Name"),
        _p(rf"I live in\s+(.+?){_END}", "Location"),
        _p(rf"I(?:'m| am) from\s+(.+?){_END}", "Location"),
        _p(rf"I(?:'m| am) located in\s+(.+?){_END}", "Location"),
        # Lookaheads here and on Vehicle leave "I work at and founded X", "I have 2
        # cars" and "I have experience" to _compound and the professional table,
        # so those shapes do not also score as Workplace or Vehicle.
        _p(rf"I work (?:at|for)\s+(?!and founded)(.+?){_END}", "Workplace"),
        _p(rf"I(?:'m| am) employed (?:at|by)\s+(.+?){_END}", "Workplace"),
        _p(rf"I(?:'m| am)\s+(\d+)(?:\s+years old)?{_END}", "Age"),
        _p(rf"my hobbies (?:are|include)\s+(.+?){_END}", "Hobbies"),
        _p(rf"I enjoy\s+(.+?){_END}", "Interests"),
        _p(rf"I (?:have|own|drive)(?:\s+a|\s+an)?\s+(?!\d+\s+cars?\b|experience\b)([^,.]+?){_END}", "Vehicle"),
    ],
    RESPONSE_STYLE: [
        _p(rf"(?:use|speak|write in)\s+(.+?)\s+(?:language|English|spelling){_END}", "Language"),
        _p(rf"(?:be|respond in a)\s+(.+?)\s+(?:tone|style|way|manner){_END}", "Style"),
        _p(rf"(?:be|keep it)\s+(concise|brief|short|succinct){_END}", "Brevity", "true"),
        _p(rf"(?:use|format with|include)\s+(.+?)\s+(?:formatting|format|structure){_END}", "Format"),
    ],
    PROFESSIONAL: [
        _p(rf"I (?:founded|started|created|established)\s+(.+?){_END}", "Founded"),
        _p(rf"my skills include\s+(.+?){_END}", "Skills"),
        _p(rf"I(?:'m| am) skilled (?:in|at)\s+(.+?){_END}", "Skills"),
        _p(rf"I have experience (?:in|with)\s+(.+?){_END}", "Experience"),
    ],
}

_WORK_AND_FOUNDED = re.compile(rf"I work at and founded\s+(.+?){_END}", re.IGNORECASE)
_CAR_COUNT = re.compile(
    r"I (?:have|own)\s+(\d+)\s+cars?(?:,|:)?\s+(.+?)(?:\.|\s+and\s+|$)", re.IGNORECASE
)
_CAR_MODEL = re.compile(
    r"\b(?:a|an)\s+([\w\s.]+?(?:Sport|Style|SUV|Sedan|Coupe|EV|Electric|Hybrid))\b",
    re.IGNORECASE,
)


@dataclass
class Extraction:
    """Result of one extraction run: the winning category and its items."""

    category: str | None = None
    items: list[Item] = field(default_factory=list)
    scores: dict[str, int] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.items)


class NaturalLanguageExtractor:
    """Classify a sentence into a category and pull key/value pairs out of it."""

    def __init__(self, categories: dict[str, list[Pattern]] | None = None) -> None:
        self.categories = categories if categories is not None else CATEGORIES

    def extract(self, text: str) -> Extraction:
        found: dict[str, list[Item]] = {name: [] for name in self.categories}

        for name, patterns in self.categories.items():
            for pattern in patterns:
                value = pattern.apply(text)
                if value:
                    found[name].append(Item(pattern.key, value))

        self._compound(text, found)

        scores = {name: len(items) for name, items in found.items()}
        best: str | None = None
        for name, score in scores.items():
            if score > 0 and (best is None or score > scores[best]):
                best = name

        if best is None:
            logger.debug("No extraction pattern matched: %.60s", text)
            return Extraction(scores=scores)
        return Extraction(category=best, items=found[best], scores=scores)

    def extract_items(self, text: str) -> list[Item]:
        return self.extract(text).items

    def _compound(self, text: str, found: dict[str, list[Item]]) -> None:
        """Patterns that feed more than one category, or need post-processing."""
        match = _WORK_AND_FOUNDED.search(text)
        if match:
            company = match.group(1).strip()
            found.setdefault(PERSONAL, []).append(Item("Workplace", company))
            found.setdefault(PROFESSIONAL, []).append(Item("Founded", company))

        models = [m.group(1).strip() for m in _CAR_MODEL.finditer(text)]
        count = _CAR_COUNT.search(text)
        if count:
            cars = " and ".join(models) if models else count.group(2).strip()
            found.setdefault(PERSONAL, []).append(Item("Cars", cars))
        elif models:
            found.setdefault(PERSONAL, []).append(Item("Cars", " and ".join(models)))


def extract_items(text: str) -> list[Item]:
    """Module-level shortcut using the default pattern table."""
    return NaturalLanguageExtractor().extract_items(text)
