"""Pydantic models for task specification documents.

This module defines the immutable document model produced by the parser:
the top-level spec document, its requirements, optional global settings
and the sub-task entries that form a dependency graph. Models carry no
validation of cross-field rules; that is the validator's job.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_MAX_ITERATIONS = 50
DEFAULT_COMPLETION_PROMISE = "<promise>COMPLETE</promise>"
GLOBAL_COMPLETION_PROMISE = "COMPLETE"
DEFAULT_MAX_PARALLEL_WORKERS = 3
DEFAULT_TASK_PRIORITY = 1
HIGH_ITERATION_THRESHOLD = 200


# =============================================================================
# ENUMS
# =============================================================================


class ModelAlias(str, Enum):
    """Short model selector used in spec documents."""

    HAIKU = "haiku"
    SONNET = "sonnet"
    OPUS = "opus"

    @property
    def model_id(self) -> str:
        """Full model identifier for this alias."""
        return MODEL_IDS[self]

    @classmethod
    def parse(cls, text: str) -> "ModelAlias | None":
        """Parse an alias case-insensitively.

        Args:
            text: Alias text such as ``"Sonnet"``.

        Returns:
            The matching alias, or None if the text is not a known alias.
        """
        try:
            return cls(text.strip().lower())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


MODEL_IDS: dict[ModelAlias, str] = {
    ModelAlias.HAIKU: "claude-haiku-4-5-20251001",
    ModelAlias.SONNET: "claude-sonnet-4-5-20250929",
    ModelAlias.OPUS: "claude-opus-4-5-20251101",
}

DEFAULT_MODEL = ModelAlias.SONNET


class Severity(str, Enum):
    """Severity of a reported issue."""

    ERROR = "error"
    WARNING = "warning"


# =============================================================================
# ISSUES
# =============================================================================


class Issue(BaseModel):
    """A field-tagged problem found while parsing or validating a spec."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Section or task-qualified key, e.g. task.api.depends_on")
    message: str = Field(description="Human-readable message")
    severity: Severity = Field(default=Severity.ERROR)

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


# =============================================================================
# DOCUMENT PARTS
# =============================================================================


class Requirement(BaseModel):
    """A single checkbox-trackable requirement."""

    model_config = ConfigDict(frozen=True)

    description: str
    completed: bool = False

    @classmethod
    def pending(cls, description: str) -> "Requirement":
        """Create an incomplete requirement."""
        return cls(description=description)

    @classmethod
    def done(cls, description: str) -> "Requirement":
        """Create a completed requirement."""
        return cls(description=description, completed=True)

    @property
    def checkbox(self) -> str:
        return "[x]" if self.completed else "[ ]"


class GlobalSettings(BaseModel):
    """Document-wide defaults for multi-task specs.

    Only present when the document declares a ``## Global Settings``
    section; used as a fallback source during resolution.
    """

    model_config = ConfigDict(frozen=True)

    default_model: ModelAlias | None = Field(
        default=DEFAULT_MODEL,
        description="Default model for all tasks",
    )
    max_parallel_workers: int | None = Field(
        default=DEFAULT_MAX_PARALLEL_WORKERS,
        description="Maximum parallel workers",
    )
    completion_promise: str = Field(
        default=GLOBAL_COMPLETION_PROMISE,
        description="Completion promise string",
    )
    max_total_usd: float | None = Field(
        default=None,
        description="Total budget limit in USD",
    )


class TaskEntry(BaseModel):
    """A named sub-task within a multi-task spec.

    ``depends_on`` holds ids of sibling tasks in the same document; they
    are resolved by string equality, never by reference.

    Example:
        >>> task = TaskEntry(id="frontend", depends_on=["backend"], priority=2)
        >>> task.is_independent
        False
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="", description="Task identifier (from ### Task: name)")
    model: ModelAlias | None = Field(default=None, description="Model override")
    priority: int = Field(
        default=DEFAULT_TASK_PRIORITY,
        description="Priority (lower = higher priority)",
    )
    depends_on: list[str] = Field(
        default_factory=list,
        description="Task ids that must complete first",
    )
    description: str = Field(default="", description="Task description")
    requirements: list[Requirement] = Field(default_factory=list)
    completion_criteria: str | None = None
    max_iterations: int | None = Field(default=None, description="Max iterations override")

    @property
    def is_independent(self) -> bool:
        """Check if this task has no dependencies."""
        return not self.depends_on


# =============================================================================
# SPEC DOCUMENT
# =============================================================================


class SpecDocument(BaseModel):
    """A parsed task specification.

    The document is immutable once created. ``raw_content`` keeps the
    original text verbatim; rendering never reproduces it byte-for-byte.

    Example:
        >>> doc = SpecDocument(title="Build API", objective="Create a REST API")
        >>> doc.is_multi_task
        False
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", description="Title from # Task: or # Spec:")
    objective: str = Field(default="", description="Objective description")
    model: ModelAlias | None = Field(default=None, description="Model selector")
    requirements: list[Requirement] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    completion_criteria: str | None = None
    max_iterations: int | None = None
    completion_promise: str | None = None
    global_settings: GlobalSettings | None = None
    tasks: list[TaskEntry] = Field(default_factory=list)
    budget: float | None = Field(default=None, description="Budget limit in USD")
    raw_content: str = Field(default="", description="Original document text")
    parse_issues: list[Issue] = Field(
        default_factory=list,
        description="Field values dropped by the lenient parser",
    )

    @property
    def is_multi_task(self) -> bool:
        """Check if this spec has sub-tasks for parallel execution."""
        return bool(self.tasks)

    @property
    def task_ids(self) -> list[str]:
        return [task.id for task in self.tasks]

    def get_task(self, task_id: str) -> TaskEntry | None:
        """Get a task by id (first match wins).

        Args:
            task_id: Task identifier.

        Returns:
            TaskEntry if found, None otherwise.
        """
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
