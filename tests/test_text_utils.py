"""Tests for text normalization helpers."""

from docgraph.utils.text import (
    normalize_entity_type,
    normalize_relationship_type,
    normalize_vocabulary,
    strip_entity_type_suffix,
)


class TestNormalizeRelationshipType:
    """Tests for normalize_relationship_type."""

    def test_spaces_and_hyphens(self):
        """Free-form labels become UPPER_SNAKE_CASE."""
        assert normalize_relationship_type("works for") == "WORKS_FOR"
        assert normalize_relationship_type("Works-For") == "WORKS_FOR"

    def test_parentheticals_removed(self):
        """Parenthetical notes are dropped."""
        assert normalize_relationship_type("acquired (in 2020)") == "ACQUIRED"

    def test_keeps_non_ascii_letters(self):
        """Letters outside ASCII survive normalization."""
        assert normalize_relationship_type("appartient à") == "APPARTIENT_À"
        assert normalize_relationship_type("gehört zu") == "GEHÖRT_ZU"

    def test_underscores_separate_words(self):
        """Existing snake case is kept without doubled underscores."""
        assert normalize_relationship_type("works__for") == "WORKS_FOR"

    def test_nothing_usable_is_empty(self):
        """Labels without word characters normalize to an empty string."""
        assert normalize_relationship_type("!!!") == ""


class TestNormalizeVocabulary:
    """Tests for normalize_vocabulary."""

    def test_entity_types(self):
        """Entity types are upper-cased, stripped and deduplicated."""
        assert normalize_vocabulary([" person ", "Person", "", "research  lab"]) == [
            "PERSON",
            "RESEARCH LAB",
        ]
        assert normalize_entity_type("drug") == "DRUG"

    def test_relationship_types(self):
        """Relationship types share the UPPER_SNAKE normalization."""
        assert normalize_vocabulary(["treats", "TREATS", "part of"], relationship=True) == [
            "TREATS",
            "PART_OF",
        ]

    def test_unusable_relationship_labels_dropped(self):
        """Labels that normalize to nothing are dropped, not replaced."""
        assert normalize_vocabulary(["!!!", "treats", "---"], relationship=True) == ["TREATS"]
        assert normalize_vocabulary(["???"], relationship=True) == []


class TestStripEntityTypeSuffix:
    """Tests for strip_entity_type_suffix."""

    def test_strips_type_suffix(self):
        """Strips a capitalized (Type) suffix."""
        assert strip_entity_type_suffix("Apple Inc. (Company)") == "Apple Inc."
        assert strip_entity_type_suffix("Federal Reserve (ORGANIZATION)") == "Federal Reserve"

    def test_preserves_other_parentheticals(self):
        """Lowercase and numeric parentheticals stay."""
        assert strip_entity_type_suffix("Apple (lowercase)") == "Apple (lowercase)"
        assert strip_entity_type_suffix("District 12 (2024)") == "District 12 (2024)"

    def test_strips_summary(self):
        """Summary text after ': ' is removed."""
        assert (
            strip_entity_type_suffix("Federal Reserve System (Organization): publisher")
            == "Federal Reserve System"
        )
