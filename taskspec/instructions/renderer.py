"""Spec rendering - canonical Markdown and instruction prompts.

Both outputs are deterministic: fixed section order, unset or empty
fields omitted. Canonical Markdown re-parses to the same title,
objective, model, requirements, max iterations and task graph; it does
not reproduce the original text byte-for-byte.
"""

from pathlib import Path

from loguru import logger

from taskspec.instructions.events import (
    FENCE_PATTERN,
    HEADING_PATTERN,
    LIST_ITEM_PATTERN,
    THEMATIC_BREAK,
)
from taskspec.instructions.models import (
    DEFAULT_TASK_PRIORITY,
    GlobalSettings,
    Requirement,
    SpecDocument,
    TaskEntry,
)
from taskspec.instructions.resolver import effective_completion_promise
from taskspec.prompts.templates import COMPLETION_INSTRUCTION, TASK_CONTEXT, TASK_DEPENDENCIES


def _section(heading: str, body: str) -> list[str]:
    return [f"## {heading}", body, ""]


def _checklist(requirements: list[Requirement]) -> list[str]:
    return [f"- {req.checkbox} {req.description}" for req in requirements]


def _bullets(values: list[str]) -> list[str]:
    return [f"- {value}" for value in values]


def _list_block(heading: str, lines: list[str]) -> str:
    return f"## {heading}\n" + "\n".join(lines) + "\n\n"


def _literal(text: str) -> str:
    """Indent free-text lines that would re-parse as headings or breaks.

    Four leading spaces put a line out of heading and thematic-break
    syntax, and the parser strips them again. Code fences pass through
    untouched; one left open is closed so later sections stay structure.
    """
    lines: list[str] = []
    fence: str | None = None
    for line in text.split("\n"):
        if fence is not None:
            stripped = line.strip()
            if stripped and set(stripped) == {fence[0]} and len(stripped) >= len(fence):
                fence = None
        else:
            match = FENCE_PATTERN.match(line)
            if match:
                fence = match.group(1)
            elif HEADING_PATTERN.match(line) or THEMATIC_BREAK.match(line):
                line = f"    {line}"
        lines.append(line)
    if fence is not None:
        lines.append(fence)
    return "\n".join(lines)


def _has_list_line(text: str) -> bool:
    return any(LIST_ITEM_PATTERN.match(line) for line in text.split("\n"))


def _amount(value: float) -> str:
    """Format a currency amount without losing precision."""
    return f"{value:.2f}" if round(value, 2) == value else repr(value)


# =============================================================================
# CANONICAL MARKDOWN
# =============================================================================


def to_markdown(doc: SpecDocument) -> str:
    """
    Render a document as canonical spec Markdown.

    Args:
        doc: Document to render.

    Returns:
        Markdown text ending in a newline.

    Example:
        >>> print(to_markdown(SpecDocument(title="Demo", objective="Do it")))
        # Task: Demo
        <BLANKLINE>
        ## Objective
        Do it
        <BLANKLINE>
    """
    lines: list[str] = []

    if doc.title:
        lines.extend([f"# Task: {doc.title}", ""])

    if doc.objective:
        lines.extend(_section("Objective", _literal(doc.objective)))

    if doc.model is not None:
        lines.extend(_section("Model", doc.model.value))

    if doc.requirements:
        lines.extend(["## Requirements", *_checklist(doc.requirements), ""])

    if doc.constraints:
        lines.extend(["## Constraints", *_bullets(doc.constraints), ""])

    if doc.completion_criteria:
        lines.extend(_section("Completion Criteria", _literal(doc.completion_criteria)))

    if doc.max_iterations is not None:
        lines.extend(_section("Max Iterations", str(doc.max_iterations)))

    if doc.completion_promise:
        lines.extend(_section("Completion Promise", doc.completion_promise))

    if doc.budget is not None:
        lines.extend(_section("Budget", _amount(doc.budget)))

    if doc.global_settings is not None:
        lines.extend(_section("Global Settings", _global_settings_body(doc.global_settings)))

    if doc.tasks:
        lines.extend(["## Tasks", ""])
        for task in doc.tasks:
            lines.extend(_task_lines(task))

    return "\n".join(lines).rstrip("\n") + "\n"


def _global_settings_body(settings: GlobalSettings) -> str:
    body: list[str] = []
    if settings.default_model is not None:
        body.append(f"default_model: {settings.default_model.value}")
    if settings.max_parallel_workers is not None:
        body.append(f"max_parallel_workers: {settings.max_parallel_workers}")
    body.append(f'completion_promise: "{settings.completion_promise}"')
    if settings.max_total_usd is not None:
        body.append(f"max_total_usd: {_amount(settings.max_total_usd)}")
    return "\n".join(body)


def _task_lines(task: TaskEntry) -> list[str]:
    # Prose and checklist directly under the task heading form its body;
    # the ## sections that follow stay scoped to the task until the next one.
    # A description with list lines would read back as requirements there.
    lines = [f"### Task: {task.id}", ""]
    in_body = not _has_list_line(task.description)

    if task.description and in_body:
        lines.extend([_literal(task.description), ""])

    if task.requirements:
        lines.extend([*_checklist(task.requirements), ""])

    if task.description and not in_body:
        lines.extend(_section("Description", _literal(task.description)))

    if task.model is not None:
        lines.extend(_section("Model", task.model.value))

    if task.priority != DEFAULT_TASK_PRIORITY:
        lines.extend(_section("Priority", str(task.priority)))

    if task.depends_on:
        lines.extend(_section("Depends On", f"[{', '.join(task.depends_on)}]"))

    if task.completion_criteria:
        lines.extend(_section("Completion Criteria", _literal(task.completion_criteria)))

    if task.max_iterations is not None:
        lines.extend(_section("Max Iterations", str(task.max_iterations)))

    return lines


def write_markdown(doc: SpecDocument, path: str | Path) -> Path:
    """
    Write canonical Markdown to a caller-chosen path.

    Args:
        doc: Document to render.
        path: Destination file.

    Returns:
        The path written.
    """
    path = Path(path)
    path.write_text(to_markdown(doc), encoding="utf-8")
    logger.info(f"Wrote spec file: {path}")
    return path


# =============================================================================
# INSTRUCTION PROMPTS
# =============================================================================


def to_prompt(doc: SpecDocument) -> str:
    """
    Compile a document into an instruction prompt for the execution agent.

    Args:
        doc: Document to compile.

    Returns:
        Prompt text ending with the completion-marker instruction.
    """
    parts = [
        f"# Task: {doc.title}\n\n",
        f"## Objective\n{doc.objective}\n\n",
    ]

    if doc.requirements:
        parts.append(_list_block("Requirements", _checklist(doc.requirements)))

    if doc.constraints:
        parts.append(_list_block("Constraints", _bullets(doc.constraints)))

    if doc.completion_criteria:
        parts.append(f"## Completion Criteria\n{doc.completion_criteria}\n\n")

    parts.append("---\n\n")
    parts.append(COMPLETION_INSTRUCTION.format(marker=effective_completion_promise(doc)))

    return "".join(parts)


def task_to_prompt(doc: SpecDocument, task: TaskEntry) -> str:
    """
    Compile one sub-task into a prompt for a parallel worker.

    The parent title and objective are included as context; document
    constraints apply to every task, and the task's own completion
    criteria take precedence over the document's.

    Args:
        doc: Parent document.
        task: Task to compile.

    Returns:
        Prompt text ending with the completion-marker instruction.
    """
    parts = [f"# Task: {task.id}\n\n"]
    parts.append(TASK_CONTEXT.format(spec_title=doc.title, spec_objective=doc.objective))

    if task.description:
        parts.append(f"## Description\n{task.description}\n\n")

    if task.requirements:
        parts.append(_list_block("Requirements", _checklist(task.requirements)))

    if task.depends_on:
        parts.append(TASK_DEPENDENCIES.format(dependencies=", ".join(task.depends_on)))

    if doc.constraints:
        parts.append(_list_block("Constraints", _bullets(doc.constraints)))

    criteria = task.completion_criteria or doc.completion_criteria
    if criteria:
        parts.append(f"## Completion Criteria\n{criteria}\n\n")

    parts.append("---\n\n")
    parts.append(COMPLETION_INSTRUCTION.format(marker=effective_completion_promise(doc)))

    return "".join(parts)
