"""Tests for the entry type and field catalogs."""

import pytest

from biblint.core.catalogs import (
    ENTRY_TYPE_INFO,
    ENTRY_TYPES,
    FIELD_INFO,
    FIELD_NAMES,
    FIELD_REQUIREMENTS,
    JOURNAL_ABBREVIATIONS,
    MONTH_ABBREVIATIONS,
    field_status,
    is_entry_type,
    is_field_name,
    requirements_for,
    suggest_fields,
    suggest_values,
)


class TestCatalogContents:
    """Catalog sizes and consistency."""

    def test_sizes(self):
        """The catalogs hold the recognized sets."""
        assert len(ENTRY_TYPES) == 16
        assert len(FIELD_NAMES) == 37
        assert len(FIELD_REQUIREMENTS) == 14

    def test_no_duplicates(self):
        """Names appear once."""
        assert len(set(ENTRY_TYPES)) == len(ENTRY_TYPES)
        assert len(set(FIELD_NAMES)) == len(FIELD_NAMES)

    def test_requirement_rows_reference_known_names(self):
        """Every requirement row uses recognized type and field names."""
        for entry_type, requirement in FIELD_REQUIREMENTS.items():
            assert entry_type in ENTRY_TYPES
            for name in requirement.required + requirement.optional:
                assert name in FIELD_NAMES, f"{entry_type}: {name}"

    def test_required_order(self):
        """Required fields keep their declared order."""
        assert FIELD_REQUIREMENTS["article"].required == ("author", "title", "journal", "year")
        assert FIELD_REQUIREMENTS["book"].required == ("author", "title", "publisher", "year")
        assert FIELD_REQUIREMENTS["online"].required == ("title", "url")

    def test_inbook_and_webpage_have_no_row(self):
        """Some recognized types carry no requirement row."""
        assert requirements_for("inbook") is None
        assert requirements_for("webpage") is None

    def test_read_only(self):
        """The requirement table cannot be modified."""
        with pytest.raises(TypeError):
            FIELD_REQUIREMENTS["article"] = None

    def test_info_tables(self):
        """Tooltip data is keyed by lowercase name."""
        assert ENTRY_TYPE_INFO["article"].requirement is FIELD_REQUIREMENTS["article"]
        assert ENTRY_TYPE_INFO["article"].example.startswith("@article{key,")
        assert ENTRY_TYPE_INFO["webpage"].requirement is None
        assert FIELD_INFO["pages"].note == "Use double dash (--) for page ranges"
        assert set(ENTRY_TYPE_INFO) == set(ENTRY_TYPES)

    def test_field_examples(self):
        """Every field tooltip carries an example value."""
        assert FIELD_INFO["pages"].example == "123--145"
        assert FIELD_INFO["month"].example == "jan"
        assert FIELD_INFO["author"].note == 'Use "and" to separate multiple authors'
        assert all(info.example for info in FIELD_INFO.values())
        assert set(FIELD_INFO) <= set(FIELD_NAMES)


class TestLookups:
    """Lookup helpers."""

    def test_case_insensitive(self):
        """Names match regardless of case."""
        assert is_entry_type("Article")
        assert is_field_name("TITLE")
        assert requirements_for("BOOK") is FIELD_REQUIREMENTS["book"]
        assert not is_entry_type("weird")
        assert not is_field_name("colour")

    @pytest.mark.parametrize("entry_type,name,expected", [
        ("article", "journal", "required"),
        ("article", "Volume", "optional"),
        ("article", "school", "unknown"),
        ("weird", "title", "unknown"),
        (None, "title", "unknown"),
    ])
    def test_field_status(self, entry_type, name, expected):
        """Fields classify as required, optional or unknown for a type."""
        assert field_status(entry_type, name) == expected

    def test_suggest_fields_order(self):
        """Suggestions list required, then optional, then the remaining names."""
        suggestions = suggest_fields("article")
        assert suggestions[:4] == ["author", "title", "journal", "year"]
        assert suggestions[4:12] == list(FIELD_REQUIREMENTS["article"].optional)
        assert len(suggestions) == len(set(suggestions)) == len(FIELD_NAMES)

    def test_suggest_fields_without_type(self):
        """Without a type, suggestions follow the catalog order."""
        assert suggest_fields(None) == list(FIELD_NAMES)
        assert suggest_fields("weird") == list(FIELD_NAMES)


class TestValueSuggestions:
    """Value candidates for month and journal fields."""

    def test_months(self):
        """Month fields suggest every abbreviation in calendar order."""
        assert suggest_values("month") == list(MONTH_ABBREVIATIONS)
        assert suggest_values("MONTH", "ju") == ["jun", "jul"]

    def test_journals(self):
        """Journal prefixes match regardless of case."""
        assert "Nature" in JOURNAL_ABBREVIATIONS
        assert suggest_values("journal", "phys") == ["Phys. Rev. Lett."]
        assert suggest_values("journal", "C") == ["Cell", "Commun. ACM"]

    def test_other_fields(self):
        """Fields without a candidate list get no suggestions."""
        assert suggest_values("title") == []
        assert suggest_values("journal", "zzz") == []
