"""Spec document compiler - parsing, validation, resolution and rendering.

This module provides the complete spec pipeline:
- Parsing (Markdown text -> SpecDocument)
- Validation (SpecDocument -> ValidationReport)
- Resolution (optional fields -> effective values)
- Rendering (SpecDocument -> canonical Markdown / instruction prompt)
- Task graph (dependencies -> cycles, execution waves)
"""

from taskspec.instructions.graph import TaskGraph, build_task_index, detect_cycle
from taskspec.instructions.models import (
    DEFAULT_COMPLETION_PROMISE,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MODEL,
    GlobalSettings,
    Issue,
    ModelAlias,
    Requirement,
    Severity,
    SpecDocument,
    TaskEntry,
)
from taskspec.instructions.parser import (
    SpecParser,
    generate_spec,
    parse_requirement,
    parse_spec,
    parse_spec_file,
)
from taskspec.instructions.renderer import task_to_prompt, to_markdown, to_prompt, write_markdown
from taskspec.instructions.resolver import (
    effective_budget,
    effective_completion_promise,
    effective_max_iterations,
    effective_model,
    effective_parallel_workers,
    effective_task_max_iterations,
    effective_task_model,
)
from taskspec.instructions.sections import SectionKind, classify_section
from taskspec.instructions.validator import SpecValidator, ValidationReport, validate

__all__ = [
    # Models
    "DEFAULT_COMPLETION_PROMISE",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_MODEL",
    "GlobalSettings",
    "Issue",
    "ModelAlias",
    "Requirement",
    "Severity",
    "SpecDocument",
    "TaskEntry",
    # Sections
    "SectionKind",
    "classify_section",
    # Parser
    "SpecParser",
    "generate_spec",
    "parse_requirement",
    "parse_spec",
    "parse_spec_file",
    # Validation
    "SpecValidator",
    "ValidationReport",
    "validate",
    # Resolution
    "effective_budget",
    "effective_completion_promise",
    "effective_max_iterations",
    "effective_model",
    "effective_parallel_workers",
    "effective_task_max_iterations",
    "effective_task_model",
    # Rendering
    "task_to_prompt",
    "to_markdown",
    "to_prompt",
    "write_markdown",
    # Graph
    "TaskGraph",
    "build_task_index",
    "detect_cycle",
]
