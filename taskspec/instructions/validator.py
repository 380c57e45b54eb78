"""Spec validation - structural and referential checks.

Validation never mutates the document and never raises. Problems are
collected into a ValidationReport of field-tagged errors and warnings;
a document is conforming exactly when the report has no errors.
"""

from typing import Any

from loguru import logger

from taskspec.instructions.graph import TaskGraph
from taskspec.instructions.models import (
    DEFAULT_COMPLETION_PROMISE,
    HIGH_ITERATION_THRESHOLD,
    GlobalSettings,
    Issue,
    Severity,
    SpecDocument,
)

# =============================================================================
# VALIDATION REPORT
# =============================================================================


class ValidationReport:
    """Ordered errors and warnings for one document."""

    def __init__(self) -> None:
        self.errors: list[Issue] = []
        self.warnings: list[Issue] = []

    def add_error(self, field: str, message: str) -> None:
        self.errors.append(Issue(field=field, message=message, severity=Severity.ERROR))

    def add_warning(self, field: str, message: str) -> None:
        self.warnings.append(Issue(field=field, message=message, severity=Severity.WARNING))

    @property
    def is_valid(self) -> bool:
        """Check if no errors were reported."""
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def merge(self, other: "ValidationReport") -> None:
        """Merge another report into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "valid": self.is_valid,
            "errors": [issue.model_dump(mode="json") for issue in self.errors],
            "warnings": [issue.model_dump(mode="json") for issue in self.warnings],
        }


# =============================================================================
# SPEC VALIDATOR
# =============================================================================


class SpecValidator:
    """
    Check a SpecDocument against the spec format's structural rules.

    Example:
        >>> report = SpecValidator().validate(doc)
        >>> report.is_valid
        True
    """

    def validate(self, doc: SpecDocument) -> ValidationReport:
        """
        Validate a spec document.

        Args:
            doc: Parsed or synthesized document.

        Returns:
            ValidationReport with errors and warnings in rule order.
        """
        report = ValidationReport()

        self._check_required(doc, report)
        self._check_limits(doc, report)
        self._check_completeness(doc, report)

        if doc.global_settings is not None:
            self._check_global_settings(doc.global_settings, report)

        if doc.tasks:
            report.merge(self.validate_tasks(doc))

        for issue in doc.parse_issues:
            report.add_warning(issue.field, issue.message)

        logger.info(
            f"Validated spec {doc.title!r}: {len(report.errors)} errors, "
            f"{len(report.warnings)} warnings"
        )
        return report

    def _check_required(self, doc: SpecDocument, report: ValidationReport) -> None:
        if not doc.title.strip():
            report.add_error("title", "Title is required (use # Task: or # Spec:)")

        if not doc.objective.strip():
            report.add_error("objective", "Objective section is required")

    def _check_limits(self, doc: SpecDocument, report: ValidationReport) -> None:
        if doc.max_iterations is not None:
            if doc.max_iterations <= 0:
                report.add_error("max_iterations", "Max iterations must be greater than 0")
            elif doc.max_iterations > HIGH_ITERATION_THRESHOLD:
                report.add_warning(
                    "max_iterations",
                    f"Max iterations is very high (>{HIGH_ITERATION_THRESHOLD}). "
                    "This may be costly.",
                )

        if doc.budget is not None and doc.budget <= 0:
            report.add_error("budget", "Budget must be greater than 0")

    def _check_completeness(self, doc: SpecDocument, report: ValidationReport) -> None:
        if not doc.requirements and not doc.tasks:
            report.add_warning(
                "requirements",
                "No requirements specified. Consider adding requirements for clarity.",
            )

        if doc.completion_promise is None and doc.global_settings is None:
            report.add_warning(
                "completion_promise",
                f"No completion promise specified. Using default: {DEFAULT_COMPLETION_PROMISE}",
            )

    def _check_global_settings(self, settings: GlobalSettings, report: ValidationReport) -> None:
        if settings.max_parallel_workers is not None and settings.max_parallel_workers <= 0:
            report.add_error(
                "global_settings.max_parallel_workers",
                "Max parallel workers must be greater than 0",
            )

        if settings.max_total_usd is not None and settings.max_total_usd <= 0:
            report.add_error(
                "global_settings.max_total_usd",
                "Total budget must be greater than 0",
            )

    def validate_tasks(self, doc: SpecDocument) -> ValidationReport:
        """
        Validate tasks in a multi-task spec.

        Args:
            doc: Document whose task list is checked.

        Returns:
            ValidationReport for the task list only.
        """
        report = ValidationReport()
        graph = TaskGraph.from_document(doc)

        for task in doc.tasks:
            if not task.id:
                report.add_error("task.id", "Task ID is required")

            for dep in task.depends_on:
                if dep not in graph:
                    report.add_error(f"task.{task.id}.depends_on", f"Unknown dependency: {dep}")

            if task.id in task.depends_on:
                report.add_error(f"task.{task.id}.depends_on", "Task cannot depend on itself")

            if task.max_iterations is not None and task.max_iterations <= 0:
                report.add_error(
                    f"task.{task.id}.max_iterations",
                    "Max iterations must be greater than 0",
                )

            if not task.description.strip() and not task.requirements:
                report.add_warning(f"task.{task.id}", "Task has no description or requirements")

        for task_id in graph.duplicates:
            report.add_error(
                f"task.{task_id}",
                f"Duplicate task id: {task_id} (first declaration is used for dependencies)",
            )

        cycle = graph.find_cycle()
        if cycle:
            report.add_error("tasks", f"Circular dependency detected: {' -> '.join(cycle)}")

        return report


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate(doc: SpecDocument) -> ValidationReport:
    """Convenience function to validate a spec document."""
    return SpecValidator().validate(doc)
