"""Spec document parser - Markdown text into a SpecDocument.

The parser makes a single left-to-right pass over the block events from
``taskspec.instructions.events``. It tracks the current second-level
section, the task in progress (opened by ``### Task: <id>``), a text
accumulator, a list-item accumulator and the section body in document
order. When a heading starts or input ends, buffered content is flushed
through the handler for the current section kind.

Parsing is lenient: a malformed field value leaves the field at its
default and records a warning in ``SpecDocument.parse_issues``. Only
read failures raise.
"""

import math
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

from taskspec.core.exceptions import SpecReadError
from taskspec.instructions.events import EventKind, tokenize
from taskspec.instructions.models import (
    DEFAULT_COMPLETION_PROMISE,
    DEFAULT_MAX_ITERATIONS,
    GlobalSettings,
    Issue,
    ModelAlias,
    Requirement,
    Severity,
    SpecDocument,
    TaskEntry,
)
from taskspec.instructions.sections import TASK_ONLY_SECTIONS, SectionKind, classify_section

TITLE_LABELS = ("Task:", "Spec:")
TASK_LABEL = "Task:"
TITLE_MAX_LENGTH = 50

UNSIGNED_INT = re.compile(r"^\d+$")
NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
CURRENCY_SUFFIX = re.compile(r"\s*usd$", re.IGNORECASE)


# =============================================================================
# FIELD HELPERS
# =============================================================================


def parse_requirement(text: str) -> Requirement:
    """Parse a list item into a Requirement.

    Args:
        text: List item text without the bullet marker.

    Returns:
        Requirement, completed when the item starts with ``[x]`` or ``[X]``.

    Example:
        >>> parse_requirement("[x] POST /todos endpoint")
        Requirement(description='POST /todos endpoint', completed=True)
    """
    text = text.strip()
    if text.startswith("[ ]"):
        return Requirement.pending(text[3:].strip())
    if text.startswith(("[x]", "[X]")):
        return Requirement.done(text[3:].strip())
    return Requirement.pending(text)


def parse_unsigned(text: str) -> int | None:
    """Parse a non-negative integer literal, or None."""
    text = text.strip()
    if UNSIGNED_INT.match(text):
        return int(text)
    return None


def parse_amount(text: str) -> float | None:
    """Parse a finite currency amount such as ``15``, ``$15.00`` or ``15 USD``."""
    value = CURRENCY_SUFFIX.sub("", text.strip()).strip().lstrip("$").strip()
    if not NUMBER.match(value):
        return None
    amount = float(value)
    return amount if math.isfinite(amount) else None


def parse_budget(text: str) -> float | None:
    """Parse budget text: a bare amount or a ``label: amount`` pair.

    Example:
        >>> parse_budget("max_total_usd: 15.00 USD")
        15.0
    """
    return parse_amount(text.split(":")[-1])


def parse_dependencies(text: str, items: list[str]) -> list[str]:
    """Parse a dependency list.

    Accepts an inline ``[a, b]`` form; otherwise the section's list items;
    otherwise a bare comma-separated line.
    """
    text = text.strip()
    if text.startswith("[") and text.endswith("]"):
        return [dep.strip() for dep in text[1:-1].split(",") if dep.strip()]
    if items:
        return [item for item in items if item]
    return [dep.strip() for dep in text.split(",") if dep.strip()]


# =============================================================================
# PARSE STATE
# =============================================================================


class _ParseState:
    """Mutable state for one parse of one document."""

    def __init__(self, content: str) -> None:
        self.doc: dict[str, Any] = {"raw_content": content}
        self.tasks: list[TaskEntry] = []
        self.task: dict[str, Any] | None = None
        self.section: SectionKind | None = None
        self.text: list[str] = []
        self.items: list[str] = []
        # Prose and items in document order, items keeping their markers
        self.body: list[str] = []
        self.item: list[str] | None = None
        self.marker = "-"
        self.heading: list[str] | None = None
        self.heading_level = 0
        self.issues: list[Issue] = []

    # -------------------------------------------------------------------------
    # Event handling
    # -------------------------------------------------------------------------

    def run(self) -> SpecDocument:
        for event in tokenize(self.doc["raw_content"]):
            kind = event.kind
            if kind is EventKind.HEADING_START:
                self.flush()
                self.heading = []
                self.heading_level = event.level
            elif kind is EventKind.HEADING_END:
                self.end_heading()
            elif kind is EventKind.ITEM_START:
                self.item = []
                self.marker = event.text or "-"
            elif kind is EventKind.ITEM_END:
                self.end_item()
            elif kind in (EventKind.TEXT, EventKind.CODE):
                self.append(event.text)
            elif self.heading is None:
                # Soft and hard breaks separate lines outside headings
                self.append("\n")

        self.flush()
        self.finish_task()

        return SpecDocument(**self.doc, tasks=self.tasks, parse_issues=self.issues)

    def append(self, text: str) -> None:
        if self.heading is not None:
            self.heading.append(text)
        elif self.item is not None:
            self.item.append(text)
        elif self.section is not None:
            self.text.append(text)
            self.body.append(text)

    def end_item(self) -> None:
        item = "".join(self.item or []).strip()
        self.item = None
        self.items.append(item)
        if self.section is not None:
            self.body.append(f"{self.marker} {item}".rstrip() + "\n")

    def end_heading(self) -> None:
        heading_text = "".join(self.heading or []).strip()
        self.heading = None

        if self.heading_level == 1:
            self.doc["title"] = _strip_label(heading_text)
            self.section = None
        elif self.heading_level == 2:
            self.section = classify_section(heading_text)
            if self.section is SectionKind.OTHER:
                logger.debug(f"Ignoring unrecognized section: {heading_text!r}")
        elif self.heading_level == 3 and heading_text.startswith(TASK_LABEL):
            self.finish_task()
            task_id = heading_text[len(TASK_LABEL):].strip()
            self.task = {"id": task_id}
            self.section = SectionKind.TASKS
            logger.debug(f"Opened task scope: {task_id!r}")

    def finish_task(self) -> None:
        if self.task is not None:
            self.tasks.append(TaskEntry(**self.task))
            self.task = None

    def flush(self) -> None:
        """Dispatch buffered content to the current section handler."""
        if self.section is not None:
            if self.section in TASK_ONLY_SECTIONS and self.task is None:
                logger.debug(f"Ignoring task-only section outside a task: {self.section.value}")
            else:
                SECTION_HANDLERS[self.section](self, "".join(self.text).strip(), self.items)
        self.text = []
        self.items = []
        self.body = []

    def prose(self) -> str:
        """Free text of the current section, list lines included."""
        return "".join(self.body).strip()

    # -------------------------------------------------------------------------
    # Targets
    # -------------------------------------------------------------------------

    @property
    def target(self) -> dict[str, Any]:
        """Field dict receiving task-scoped values."""
        return self.task if self.task is not None else self.doc

    def field_tag(self, name: str) -> str:
        if self.task is not None:
            return f"task.{self.task['id']}.{name}"
        return name

    def drop(self, field: str, value: str, expected: str) -> None:
        """Record a malformed value that was left unset."""
        message = f"Ignored {expected} value {value!r}"
        logger.debug(f"{field}: {message}")
        self.issues.append(Issue(field=field, message=message, severity=Severity.WARNING))

    # -------------------------------------------------------------------------
    # Section handlers
    # -------------------------------------------------------------------------

    def on_objective(self, text: str, items: list[str]) -> None:
        if self.task is not None:
            self.task["description"] = self.prose()
        else:
            self.doc["objective"] = self.prose()

    def on_model(self, text: str, items: list[str]) -> None:
        value = _scalar(text, items)
        model = ModelAlias.parse(value)
        if model is not None:
            self.target["model"] = model
        elif value:
            self.drop(self.field_tag("model"), value, "model")

    def on_requirements(self, text: str, items: list[str]) -> None:
        self.target["requirements"] = [parse_requirement(item) for item in items if item]

    def on_constraints(self, text: str, items: list[str]) -> None:
        self.doc["constraints"] = [item for item in items if item]

    def on_completion_criteria(self, text: str, items: list[str]) -> None:
        criteria = self.prose()
        if criteria:
            self.target["completion_criteria"] = criteria

    def on_max_iterations(self, text: str, items: list[str]) -> None:
        value = _scalar(text, items)
        iterations = parse_unsigned(value)
        if iterations is not None:
            self.target["max_iterations"] = iterations
        elif value:
            self.drop(self.field_tag("max_iterations"), value, "max iterations")

    def on_completion_promise(self, text: str, items: list[str]) -> None:
        value = _scalar(text, items)
        if value:
            self.doc["completion_promise"] = value

    def on_budget(self, text: str, items: list[str]) -> None:
        value = _scalar(text, items)
        budget = parse_budget(value)
        if budget is not None:
            self.doc["budget"] = budget
        elif value:
            self.drop("budget", value, "budget")

    def on_global_settings(self, text: str, items: list[str]) -> None:
        self.doc["global_settings"] = self.parse_global_settings([*text.splitlines(), *items])

    def on_tasks(self, text: str, items: list[str]) -> None:
        # Body of a ### Task: heading; a bare ## Tasks marker has no payload
        if self.task is None:
            return
        if text:
            self.task["description"] = text
        if items:
            self.task["requirements"] = [parse_requirement(item) for item in items if item]

    def on_description(self, text: str, items: list[str]) -> None:
        if self.task is not None:
            self.task["description"] = self.prose()

    def on_priority(self, text: str, items: list[str]) -> None:
        if self.task is None:
            return
        value = _scalar(text, items)
        priority = parse_unsigned(value)
        if priority is not None:
            self.task["priority"] = priority
        elif value:
            self.drop(self.field_tag("priority"), value, "priority")

    def on_dependencies(self, text: str, items: list[str]) -> None:
        if self.task is not None:
            self.task["depends_on"] = parse_dependencies(text, items)

    def on_other(self, text: str, items: list[str]) -> None:
        pass

    def parse_global_settings(self, lines: list[str]) -> GlobalSettings:
        values: dict[str, Any] = {}

        for line in lines:
            key, sep, value = line.strip().partition(":")
            if not sep:
                continue
            key = key.strip().lower()
            value = value.strip()
            tag = f"global_settings.{key}"

            if key == "default_model":
                model = ModelAlias.parse(value)
                if model is not None:
                    values["default_model"] = model
                else:
                    self.drop(tag, value, "model")
            elif key == "max_parallel_workers":
                workers = parse_unsigned(value)
                if workers is not None:
                    values["max_parallel_workers"] = workers
                else:
                    self.drop(tag, value, "worker count")
            elif key == "completion_promise":
                values["completion_promise"] = value.strip('"')
            elif key == "max_total_usd":
                amount = parse_amount(value)
                if amount is not None:
                    values["max_total_usd"] = amount
                else:
                    self.drop(tag, value, "amount")

        return GlobalSettings(**values)


SECTION_HANDLERS: dict[SectionKind, Callable[[_ParseState, str, list[str]], None]] = {
    SectionKind.OBJECTIVE: _ParseState.on_objective,
    SectionKind.MODEL: _ParseState.on_model,
    SectionKind.REQUIREMENTS: _ParseState.on_requirements,
    SectionKind.CONSTRAINTS: _ParseState.on_constraints,
    SectionKind.COMPLETION_CRITERIA: _ParseState.on_completion_criteria,
    SectionKind.MAX_ITERATIONS: _ParseState.on_max_iterations,
    SectionKind.COMPLETION_PROMISE: _ParseState.on_completion_promise,
    SectionKind.BUDGET: _ParseState.on_budget,
    SectionKind.GLOBAL_SETTINGS: _ParseState.on_global_settings,
    SectionKind.TASKS: _ParseState.on_tasks,
    SectionKind.DESCRIPTION: _ParseState.on_description,
    SectionKind.PRIORITY: _ParseState.on_priority,
    SectionKind.DEPENDENCIES: _ParseState.on_dependencies,
    SectionKind.OTHER: _ParseState.on_other,
}


def _strip_label(heading: str) -> str:
    for label in TITLE_LABELS:
        if heading.startswith(label):
            return heading[len(label):].strip()
    return heading


def _scalar(text: str, items: list[str]) -> str:
    """Value of a single-value section: its prose, else its first list item."""
    if text:
        return text
    return items[0] if items else ""


# =============================================================================
# SPEC PARSER
# =============================================================================


class SpecParser:
    """
    Parse Markdown spec documents into SpecDocument models.

    Example:
        >>> doc = SpecParser.parse("# Task: Build API\\n\\n## Objective\\nCreate a REST API")
        >>> doc.title
        'Build API'
    """

    @staticmethod
    def parse(content: str) -> SpecDocument:
        """
        Parse spec text into a SpecDocument.

        Args:
            content: Markdown document text.

        Returns:
            SpecDocument with raw_content preserved verbatim.
        """
        doc = _ParseState(content).run()
        logger.debug(
            f"Parsed spec {doc.title!r}: {len(doc.requirements)} requirements, "
            f"{len(doc.tasks)} tasks, {len(doc.parse_issues)} parse issues"
        )
        return doc

    @staticmethod
    def parse_file(path: str | Path) -> SpecDocument:
        """
        Read and parse a spec file.

        Args:
            path: Path to a UTF-8 Markdown file.

        Returns:
            Parsed SpecDocument.

        Raises:
            SpecReadError: If the file cannot be read or decoded.
        """
        path = Path(path)
        logger.info(f"Loading spec file: {path}")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SpecReadError(str(path), str(e)) from e
        return SpecParser.parse(content)

    @staticmethod
    def generate_spec(
        description: str,
        model: ModelAlias | None = None,
        scaffold: bool = False,
    ) -> SpecDocument:
        """
        Synthesize a spec from a short natural-language description.

        The title is the first line truncated to 50 characters; the whole
        description becomes the objective.

        Args:
            description: Free-text task description.
            model: Optional model selector.
            scaffold: Add placeholder requirements, constraints and criteria
                for the user to fill in.

        Returns:
            New SpecDocument.

        Example:
            >>> SpecParser.generate_spec("Build a todo app").max_iterations
            50
        """
        description = description.strip()
        first_line = description.splitlines()[0] if description else ""

        fields: dict[str, Any] = {
            "title": first_line.strip()[:TITLE_MAX_LENGTH],
            "objective": description,
            "model": model,
            "max_iterations": DEFAULT_MAX_ITERATIONS,
            "completion_promise": DEFAULT_COMPLETION_PROMISE,
        }
        if scaffold:
            fields["requirements"] = [Requirement.pending(f"Requirement {n}") for n in (1, 2, 3)]
            fields["constraints"] = ["Constraint 1", "Constraint 2"]
            fields["completion_criteria"] = "All requirements implemented and tested"

        return SpecDocument(**fields)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def parse_spec(content: str) -> SpecDocument:
    """Convenience function to parse spec text."""
    return SpecParser.parse(content)


def parse_spec_file(path: str | Path) -> SpecDocument:
    """Convenience function to read and parse a spec file."""
    return SpecParser.parse_file(path)


def generate_spec(
    description: str,
    model: ModelAlias | None = None,
    scaffold: bool = False,
) -> SpecDocument:
    """Convenience function to synthesize a spec from a description."""
    return SpecParser.generate_spec(description, model=model, scaffold=scaffold)
