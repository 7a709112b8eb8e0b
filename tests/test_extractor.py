"""Tests for the natural-language extractor."""

from __future__ import annotations

import pytest

from memsync.template.codec import Item
from memsync.template.extractor import (
    PERSONAL,
    PROFESSIONAL,
    RESPONSE_STYLE,
    NaturalLanguageExtractor,
    extract_items,
)


@pytest.fixture
def extractor() -> NaturalLanguageExtractor:
    return NaturalLanguageExtractor()


class TestPersonal:
    def test_location(self, extractor: NaturalLanguageExtractor):
        result = extractor.extract("I live in London")
        assert result.category == PERSONAL
        assert result.items == [Item("Location", "London")]

    def test_name_stops_at_punctuation(self, extractor: NaturalLanguageExtractor):
        assert extractor.extract_items("My name is Alice Chen.") == [Item("Name", "Alice Chen")]

    def test_several_facts(self, extractor: NaturalLanguageExtractor):
        items = extractor.extract_items("I live in Paris, I work at Acme.")
        assert Item("Location", "Paris") in items
        assert Item("Workplace", "Acme") in items

    def test_age(self, extractor: NaturalLanguageExtractor):
        assert extractor.extract_items("I am 30 years old") == [Item("Age", "30")]

    def test_cars_with_models(self, extractor: NaturalLanguageExtractor):
        items = extractor.extract_items("I have 2 cars, a BMW X5 Sport and a Tesla Model Y EV")
        assert items == [Item("Cars", "BMW X5 Sport and Tesla Model Y EV")]


class TestOtherCategories:
    def test_brevity(self, extractor: NaturalLanguageExtractor):
        result = extractor.extract("Please be concise.")
        assert result.category == RESPONSE_STYLE
        assert result.items == [Item("Brevity", "concise")]

    def test_skills(self, extractor: NaturalLanguageExtractor):
        result = extractor.extract("My skills include Python and Rust")
        assert result.category == PROFESSIONAL
        assert result.items == [Item("Skills", "Python and Rust")]

    def test_experience_is_not_a_vehicle(self, extractor: NaturalLanguageExtractor):
        result = extractor.extract("I have experience with Kubernetes")
        assert result.category == PROFESSIONAL
        assert result.items == [Item("Experience", "Kubernetes")]


class TestCompound:
    def test_work_and_founded_feeds_two_categories(self, extractor: NaturalLanguageExtractor):
        result = extractor.extract("I work at and founded New Model VC")
        assert result.scores[PERSONAL] == 1
        assert result.scores[PROFESSIONAL] == 1
        # Tie goes to the category declared first
        assert result.category == PERSONAL
        assert result.items == [Item("Workplace", "New Model VC")]

    def test_highest_score_wins(self, extractor: NaturalLanguageExtractor):
        result = extractor.extract("I founded Acme, my skills include sales. I live in Rome")
        assert result.category == PROFESSIONAL
        assert [i.key for i in result.items] == ["Founded", "Skills"]


class TestNoMatch:
    def test_empty_result(self, extractor: NaturalLanguageExtractor):
        result = extractor.extract("the weather is nice today")
        assert result.category is None
        assert result.items == []
        assert not result

    def test_module_shortcut(self):
        assert extract_items("nothing to see") == []
