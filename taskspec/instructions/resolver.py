"""Effective-value resolution for optional spec fields.

Each field has one ordered chain of fallback sources, declared below.
The first source that yields a value wins; otherwise the field's fixed
default applies. Values are recomputed on every call.

    model               document.model -> global_settings.default_model -> sonnet
    max iterations      document.max_iterations -> 50
    completion promise  document.completion_promise
                        -> global_settings.completion_promise
                        -> <promise>COMPLETE</promise>
    budget              document.budget -> global_settings.max_total_usd -> None
    parallel workers    global_settings.max_parallel_workers -> 3
    task model          task.model -> caller default
    task max iterations task.max_iterations -> caller default
"""

from collections.abc import Callable
from typing import Any, NamedTuple

from taskspec.instructions.models import (
    DEFAULT_COMPLETION_PROMISE,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MAX_PARALLEL_WORKERS,
    DEFAULT_MODEL,
    ModelAlias,
    SpecDocument,
    TaskEntry,
)

DEFAULT_SOURCE = "default"


class Fallback(NamedTuple):
    """One named source in a resolution chain."""

    source: str
    getter: Callable[[SpecDocument], Any]


class Resolved(NamedTuple):
    """A resolved value and the source it came from."""

    value: Any
    source: str


def _global(attr: str) -> Callable[[SpecDocument], Any]:
    def getter(doc: SpecDocument) -> Any:
        if doc.global_settings is None:
            return None
        return getattr(doc.global_settings, attr)

    return getter


MODEL_CHAIN: tuple[Fallback, ...] = (
    Fallback("model", lambda doc: doc.model),
    Fallback("global_settings.default_model", _global("default_model")),
)

MAX_ITERATIONS_CHAIN: tuple[Fallback, ...] = (
    Fallback("max_iterations", lambda doc: doc.max_iterations),
)

COMPLETION_PROMISE_CHAIN: tuple[Fallback, ...] = (
    Fallback("completion_promise", lambda doc: doc.completion_promise),
    Fallback("global_settings.completion_promise", _global("completion_promise")),
)

BUDGET_CHAIN: tuple[Fallback, ...] = (
    Fallback("budget", lambda doc: doc.budget),
    Fallback("global_settings.max_total_usd", _global("max_total_usd")),
)

PARALLEL_WORKERS_CHAIN: tuple[Fallback, ...] = (
    Fallback("global_settings.max_parallel_workers", _global("max_parallel_workers")),
)


def resolve(doc: SpecDocument, chain: tuple[Fallback, ...], default: Any) -> Resolved:
    """
    Walk a fallback chain.

    Args:
        doc: Document to read from.
        chain: Ordered fallback sources.
        default: Value used when every source is unset.

    Returns:
        Resolved value with the name of the winning source.

    Example:
        >>> resolve(doc, MODEL_CHAIN, DEFAULT_MODEL)
        Resolved(value=<ModelAlias.OPUS: 'opus'>, source='global_settings.default_model')
    """
    for fallback in chain:
        value = fallback.getter(doc)
        if value is not None:
            return Resolved(value, fallback.source)
    return Resolved(default, DEFAULT_SOURCE)


# =============================================================================
# DOCUMENT FIELDS
# =============================================================================


def effective_model(doc: SpecDocument) -> ModelAlias:
    """Get the effective model for a spec."""
    return resolve(doc, MODEL_CHAIN, DEFAULT_MODEL).value


def effective_max_iterations(doc: SpecDocument) -> int:
    """Get the effective max iterations for a spec."""
    return resolve(doc, MAX_ITERATIONS_CHAIN, DEFAULT_MAX_ITERATIONS).value


def effective_completion_promise(doc: SpecDocument) -> str:
    """Get the completion marker the agent must emit."""
    return resolve(doc, COMPLETION_PROMISE_CHAIN, DEFAULT_COMPLETION_PROMISE).value


def effective_budget(doc: SpecDocument) -> float | None:
    """Get the spending cap, if any."""
    return resolve(doc, BUDGET_CHAIN, None).value


def effective_parallel_workers(doc: SpecDocument) -> int:
    return resolve(doc, PARALLEL_WORKERS_CHAIN, DEFAULT_MAX_PARALLEL_WORKERS).value


# =============================================================================
# TASK FIELDS
# =============================================================================


def effective_task_model(task: TaskEntry, default: ModelAlias) -> ModelAlias:
    """
    Get the effective model for a task.

    Args:
        task: Task entry.
        default: Fallback, typically ``effective_model(doc)``.
    """
    return task.model if task.model is not None else default


def effective_task_max_iterations(task: TaskEntry, default: int) -> int:
    """Get the effective max iterations for a task."""
    return task.max_iterations if task.max_iterations is not None else default
