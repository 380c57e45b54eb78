"""Unit tests for spec document models."""

import pytest
from pydantic import ValidationError

from taskspec.instructions.models import (
    DEFAULT_MODEL,
    GLOBAL_COMPLETION_PROMISE,
    GlobalSettings,
    Issue,
    ModelAlias,
    Requirement,
    Severity,
    SpecDocument,
    TaskEntry,
)


class TestModelAlias:
    """Tests for ModelAlias."""

    def test_parse_case_insensitive(self):
        """Test parsing aliases regardless of case."""
        assert ModelAlias.parse("Sonnet") == ModelAlias.SONNET
        assert ModelAlias.parse("  OPUS ") == ModelAlias.OPUS
        assert ModelAlias.parse("haiku") == ModelAlias.HAIKU

    def test_parse_unknown(self):
        """Test unknown alias returns None."""
        assert ModelAlias.parse("gpt-4") is None
        assert ModelAlias.parse("") is None

    def test_model_id(self):
        """Test every alias maps to a full model id."""
        for alias in ModelAlias:
            assert alias.model_id.startswith(f"claude-{alias.value}")

    def test_str(self):
        """Test string form is the alias value."""
        assert str(ModelAlias.OPUS) == "opus"

    def test_default(self):
        """Test the default model."""
        assert DEFAULT_MODEL == ModelAlias.SONNET


class TestRequirement:
    """Tests for Requirement."""

    def test_pending(self):
        """Test creating an incomplete requirement."""
        req = Requirement.pending("Write docs")
        assert req.description == "Write docs"
        assert req.completed is False
        assert req.checkbox == "[ ]"

    def test_done(self):
        """Test creating a completed requirement."""
        req = Requirement.done("Write docs")
        assert req.completed is True
        assert req.checkbox == "[x]"

    def test_frozen(self):
        """Test requirements are immutable."""
        req = Requirement.pending("Write docs")
        with pytest.raises(ValidationError):
            req.completed = True


class TestIssue:
    """Tests for Issue."""

    def test_default_severity(self):
        """Test issues default to errors."""
        issue = Issue(field="title", message="Title is required")
        assert issue.severity == Severity.ERROR

    def test_str(self):
        """Test string form includes field and message."""
        issue = Issue(field="budget", message="Budget must be greater than 0")
        assert str(issue) == "budget: Budget must be greater than 0"


class TestGlobalSettings:
    """Tests for GlobalSettings."""

    def test_defaults(self):
        """Test default values."""
        settings = GlobalSettings()
        assert settings.default_model == ModelAlias.SONNET
        assert settings.max_parallel_workers == 3
        assert settings.completion_promise == GLOBAL_COMPLETION_PROMISE
        assert settings.max_total_usd is None


class TestTaskEntry:
    """Tests for TaskEntry."""

    def test_defaults(self):
        """Test default values."""
        task = TaskEntry(id="backend")
        assert task.priority == 1
        assert task.depends_on == []
        assert task.model is None
        assert task.max_iterations is None
        assert task.is_independent

    def test_dependent(self):
        """Test a task with dependencies is not independent."""
        task = TaskEntry(id="frontend", depends_on=["backend"])
        assert not task.is_independent


class TestSpecDocument:
    """Tests for SpecDocument."""

    def test_empty_document(self):
        """Test an empty document has no tasks and no limits."""
        doc = SpecDocument()
        assert doc.title == ""
        assert doc.max_iterations is None
        assert doc.completion_promise is None
        assert not doc.is_multi_task

    def test_task_lookup(self):
        """Test task lookup returns the first match."""
        doc = SpecDocument(
            tasks=[
                TaskEntry(id="a", description="first"),
                TaskEntry(id="b"),
                TaskEntry(id="a", description="second"),
            ]
        )
        assert doc.is_multi_task
        assert doc.task_ids == ["a", "b", "a"]
        assert doc.get_task("a").description == "first"
        assert doc.get_task("missing") is None

    def test_frozen(self):
        """Test documents are immutable."""
        doc = SpecDocument(title="Demo")
        with pytest.raises(ValidationError):
            doc.title = "Other"

    def test_model_copy(self):
        """Test programmatic changes produce a new document."""
        doc = SpecDocument(title="Demo", max_iterations=10)
        changed = doc.model_copy(update={"max_iterations": 20})

        assert changed.max_iterations == 20
        assert doc.max_iterations == 10
