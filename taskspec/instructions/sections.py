"""Section vocabulary for spec documents.

Second-level headings are classified once into a closed set of section
kinds. Unknown headings map to ``SectionKind.OTHER``.
"""

import re
from enum import Enum
from types import MappingProxyType


class SectionKind(str, Enum):
    """Known second-level section kinds."""

    OBJECTIVE = "objective"
    MODEL = "model"
    REQUIREMENTS = "requirements"
    CONSTRAINTS = "constraints"
    COMPLETION_CRITERIA = "completion criteria"
    MAX_ITERATIONS = "max iterations"
    COMPLETION_PROMISE = "completion promise"
    BUDGET = "budget"
    GLOBAL_SETTINGS = "global settings"
    TASKS = "tasks"
    # Task-only fields
    DESCRIPTION = "description"
    PRIORITY = "priority"
    DEPENDENCIES = "dependencies"
    OTHER = "other"


SECTION_NAMES: MappingProxyType[str, SectionKind] = MappingProxyType({
    "objective": SectionKind.OBJECTIVE,
    "model": SectionKind.MODEL,
    "requirements": SectionKind.REQUIREMENTS,
    "constraints": SectionKind.CONSTRAINTS,
    "completion criteria": SectionKind.COMPLETION_CRITERIA,
    "max iterations": SectionKind.MAX_ITERATIONS,
    "completion promise": SectionKind.COMPLETION_PROMISE,
    "budget": SectionKind.BUDGET,
    "global settings": SectionKind.GLOBAL_SETTINGS,
    "tasks": SectionKind.TASKS,
    "description": SectionKind.DESCRIPTION,
    "priority": SectionKind.PRIORITY,
    "depends_on": SectionKind.DEPENDENCIES,
    "depends on": SectionKind.DEPENDENCIES,
    "dependencies": SectionKind.DEPENDENCIES,
})

TASK_ONLY_SECTIONS = frozenset({
    SectionKind.DESCRIPTION,
    SectionKind.PRIORITY,
    SectionKind.DEPENDENCIES,
})

_WHITESPACE = re.compile(r"\s+")


def classify_section(heading: str) -> SectionKind:
    """Map heading text to a section kind.

    Args:
        heading: Raw heading text, e.g. ``"Completion  Criteria"``.

    Returns:
        Matching SectionKind, or SectionKind.OTHER.

    Example:
        >>> classify_section("Max Iterations")
        <SectionKind.MAX_ITERATIONS: 'max iterations'>
    """
    name = _WHITESPACE.sub(" ", heading.strip().lower())
    return SECTION_NAMES.get(name, SectionKind.OTHER)
