"""Unit tests for SpecValidator."""

import pytest

from taskspec.instructions.models import (
    GlobalSettings,
    Requirement,
    Severity,
    SpecDocument,
    TaskEntry,
)
from taskspec.instructions.parser import parse_spec
from taskspec.instructions.validator import SpecValidator, ValidationReport, validate


@pytest.fixture
def validator():
    """Create a validator instance."""
    return SpecValidator()


def make_doc(**overrides) -> SpecDocument:
    fields = {
        "title": "Build API",
        "objective": "Create a REST API",
        "requirements": [Requirement.pending("GET /todos")],
        "completion_promise": "<promise>COMPLETE</promise>",
    }
    fields.update(overrides)
    return SpecDocument(**fields)


def fields_of(issues) -> list[str]:
    return [issue.field for issue in issues]


class TestValidationReport:
    """Tests for ValidationReport."""

    def test_empty_report_is_valid(self):
        """Test a fresh report."""
        report = ValidationReport()
        assert report.is_valid
        assert not report.has_warnings

    def test_add_and_merge(self):
        """Test adding issues and merging reports."""
        report = ValidationReport()
        report.add_error("title", "Title is required")
        other = ValidationReport()
        other.add_warning("requirements", "No requirements")

        report.merge(other)

        assert not report.is_valid
        assert report.has_warnings
        assert report.errors[0].severity == Severity.ERROR
        assert report.warnings[0].severity == Severity.WARNING

    def test_to_dict(self):
        """Test dictionary form."""
        report = ValidationReport()
        report.add_error("budget", "Budget must be greater than 0")

        data = report.to_dict()

        assert data["valid"] is False
        assert data["errors"] == [
            {"field": "budget", "message": "Budget must be greater than 0", "severity": "error"}
        ]
        assert data["warnings"] == []


class TestDocumentRules:
    """Tests for document-level rules."""

    def test_valid_document(self, validator):
        """Test a complete document has no errors or warnings."""
        report = validator.validate(make_doc())
        assert report.is_valid
        assert report.warnings == []

    def test_parsed_document_valid(self, single_task_spec):
        """Test the sample document validates cleanly."""
        report = validate(parse_spec(single_task_spec))
        assert report.errors == []
        assert report.warnings == []

    def test_missing_title_and_objective(self, validator):
        """Test required fields."""
        report = validator.validate(make_doc(title="", objective="   "))
        assert fields_of(report.errors) == ["title", "objective"]

    def test_zero_max_iterations(self, validator):
        """Test zero iterations is an error."""
        report = validator.validate(make_doc(max_iterations=0))
        assert fields_of(report.errors) == ["max_iterations"]

    def test_high_max_iterations(self, validator):
        """Test a very high iteration count warns."""
        report = validator.validate(make_doc(max_iterations=500))
        assert report.is_valid
        assert fields_of(report.warnings) == ["max_iterations"]

    def test_threshold_not_warned(self, validator):
        """Test exactly the threshold does not warn."""
        assert validator.validate(make_doc(max_iterations=200)).warnings == []

    @pytest.mark.parametrize("budget", [0.0, -5.0])
    def test_non_positive_budget(self, validator, budget):
        """Test budget must be positive."""
        report = validator.validate(make_doc(budget=budget))
        assert fields_of(report.errors) == ["budget"]

    def test_no_requirements_warns(self, validator):
        """Test missing requirements and tasks warn."""
        report = validator.validate(make_doc(requirements=[]))
        assert report.is_valid
        assert fields_of(report.warnings) == ["requirements"]

    def test_no_completion_promise_warns(self, validator):
        """Test a missing completion promise warns."""
        report = validator.validate(make_doc(completion_promise=None))
        assert fields_of(report.warnings) == ["completion_promise"]
        assert "<promise>COMPLETE</promise>" in report.warnings[0].message

    def test_global_settings_supply_promise(self, validator):
        """Test global settings count as a completion promise source."""
        doc = make_doc(completion_promise=None, global_settings=GlobalSettings())
        assert validator.validate(doc).warnings == []

    def test_global_settings_limits(self, validator):
        """Test global settings numeric rules."""
        doc = make_doc(
            global_settings=GlobalSettings(max_parallel_workers=0, max_total_usd=-1.0)
        )
        report = validator.validate(doc)
        assert fields_of(report.errors) == [
            "global_settings.max_parallel_workers",
            "global_settings.max_total_usd",
        ]

    def test_parse_issues_surface_as_warnings(self, validator):
        """Test dropped values are reported as warnings."""
        doc = parse_spec(
            "# T\n\n## Objective\nDo it\n\n## Requirements\n- one\n\n"
            "## Completion Promise\nDONE\n\n## Model\ngpt-4\n"
        )
        report = validator.validate(doc)
        assert report.is_valid
        assert fields_of(report.warnings) == ["model"]

    def test_does_not_mutate(self, validator):
        """Test validation leaves the document unchanged."""
        doc = make_doc(title="")
        before = doc.model_dump()
        validator.validate(doc)
        assert doc.model_dump() == before


class TestTaskRules:
    """Tests for task-level rules."""

    def test_valid_tasks(self, validator, multi_task_spec):
        """Test the multi-task sample is valid."""
        report = validator.validate(parse_spec(multi_task_spec))
        assert report.errors == []

    def test_empty_task_id(self, validator):
        """Test tasks need an id."""
        doc = make_doc(tasks=[TaskEntry(id="", description="x")])
        assert "task.id" in fields_of(validator.validate(doc).errors)

    def test_unknown_dependency(self, validator):
        """Test references to missing tasks."""
        doc = make_doc(tasks=[TaskEntry(id="api", description="x", depends_on=["db"])])
        report = validator.validate(doc)

        assert fields_of(report.errors) == ["task.api.depends_on"]
        assert report.errors[0].message == "Unknown dependency: db"

    def test_self_dependency(self, validator):
        """Test a task depending on itself."""
        doc = make_doc(tasks=[TaskEntry(id="api", description="x", depends_on=["api"])])
        report = validator.validate(doc)

        assert "task.api.depends_on" in fields_of(report.errors)
        assert any("itself" in issue.message for issue in report.errors)

    def test_cycle(self, validator):
        """Test a two-task cycle."""
        doc = make_doc(
            tasks=[
                TaskEntry(id="task1", description="x", depends_on=["task2"]),
                TaskEntry(id="task2", description="y", depends_on=["task1"]),
            ]
        )
        report = validator.validate(doc)

        assert fields_of(report.errors) == ["tasks"]
        assert "Circular" in report.errors[0].message
        assert report.errors[0].message.endswith("task1 -> task2 -> task1")

    def test_parsed_cycle(self, validator, cyclic_spec):
        """Test a cycle declared in a document."""
        report = validator.validate(parse_spec(cyclic_spec))
        assert any("Circular" in issue.message for issue in report.errors)

    def test_only_first_cycle_reported(self, validator):
        """Test two disjoint cycles yield one error."""
        doc = make_doc(
            tasks=[
                TaskEntry(id="a", description="x", depends_on=["b"]),
                TaskEntry(id="b", description="x", depends_on=["a"]),
                TaskEntry(id="c", description="x", depends_on=["d"]),
                TaskEntry(id="d", description="x", depends_on=["c"]),
            ]
        )
        errors = validator.validate(doc).errors
        assert [issue.message for issue in errors] == ["Circular dependency detected: a -> b -> a"]

    def test_task_max_iterations(self, validator):
        """Test task iteration overrides must be positive."""
        doc = make_doc(tasks=[TaskEntry(id="api", description="x", max_iterations=0)])
        assert fields_of(validator.validate(doc).errors) == ["task.api.max_iterations"]

    def test_task_without_content_warns(self, validator):
        """Test an empty task warns."""
        doc = make_doc(tasks=[TaskEntry(id="api")])
        report = validator.validate(doc)

        assert report.is_valid
        assert fields_of(report.warnings) == ["task.api"]

    def test_duplicate_ids(self, validator):
        """Test duplicate task ids are errors."""
        doc = make_doc(
            tasks=[
                TaskEntry(id="api", description="x"),
                TaskEntry(id="api", description="y"),
            ]
        )
        report = validator.validate(doc)

        assert fields_of(report.errors) == ["task.api"]
        assert "Duplicate" in report.errors[0].message

    def test_tasks_replace_requirements(self, validator):
        """Test tasks satisfy the completeness check."""
        doc = make_doc(requirements=[], tasks=[TaskEntry(id="api", description="x")])
        assert validator.validate(doc).warnings == []
