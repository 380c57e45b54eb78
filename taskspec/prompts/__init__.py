"""Prompt templates for compiled spec prompts."""

from taskspec.prompts.templates import (
    COMPLETION_INSTRUCTION,
    TASK_CONTEXT,
    TASK_DEPENDENCIES,
    PromptTemplate,
)

__all__ = [
    "COMPLETION_INSTRUCTION",
    "PromptTemplate",
    "TASK_CONTEXT",
    "TASK_DEPENDENCIES",
]
