"""Unit tests for section classification."""

import pytest

from taskspec.instructions.parser import SECTION_HANDLERS
from taskspec.instructions.sections import (
    SECTION_NAMES,
    TASK_ONLY_SECTIONS,
    SectionKind,
    classify_section,
)


class TestClassifySection:
    """Tests for classify_section."""

    @pytest.mark.parametrize(
        "heading,expected",
        [
            ("Objective", SectionKind.OBJECTIVE),
            ("MODEL", SectionKind.MODEL),
            ("Completion Criteria", SectionKind.COMPLETION_CRITERIA),
            ("completion   criteria", SectionKind.COMPLETION_CRITERIA),
            ("Max Iterations", SectionKind.MAX_ITERATIONS),
            ("Global Settings", SectionKind.GLOBAL_SETTINGS),
            ("Depends On", SectionKind.DEPENDENCIES),
            ("depends_on", SectionKind.DEPENDENCIES),
            ("Dependencies", SectionKind.DEPENDENCIES),
            ("  Budget  ", SectionKind.BUDGET),
        ],
    )
    def test_known_headings(self, heading, expected):
        """Test known headings classify case-insensitively."""
        assert classify_section(heading) == expected

    def test_unknown_heading(self):
        """Test unknown headings map to OTHER."""
        assert classify_section("Notes") == SectionKind.OTHER
        assert classify_section("") == SectionKind.OTHER


class TestVocabulary:
    """Tests for the section vocabulary tables."""

    def test_every_kind_has_a_handler(self):
        """Test the parser handles every section kind."""
        assert set(SECTION_HANDLERS) == set(SectionKind)

    def test_every_kind_but_other_is_named(self):
        """Test each kind except OTHER is reachable from a heading."""
        assert set(SECTION_NAMES.values()) == set(SectionKind) - {SectionKind.OTHER}

    def test_names_are_read_only(self):
        """Test the vocabulary cannot be mutated."""
        with pytest.raises(TypeError):
            SECTION_NAMES["notes"] = SectionKind.OTHER  # type: ignore[index]

    def test_task_only_sections(self):
        """Test task-only fields."""
        assert TASK_ONLY_SECTIONS == {
            SectionKind.DESCRIPTION,
            SectionKind.PRIORITY,
            SectionKind.DEPENDENCIES,
        }
