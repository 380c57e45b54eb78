"""
Prompt templates for compiled spec prompts.

The renderer assembles instruction prompts from these fragments so the
wording handed to the execution agent lives in one place.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# TEMPLATE MODEL
# =============================================================================


class PromptTemplate(BaseModel):
    """A reusable prompt template."""

    model_config = ConfigDict(frozen=True)

    name: str
    template: str
    description: str = ""
    variables: list[str] = Field(default_factory=list)

    def format(self, **kwargs: Any) -> str:
        """Format the template with provided values.

        Args:
            **kwargs: Template variable values.

        Returns:
            Formatted prompt string.

        Raises:
            KeyError: If a declared variable is missing.
        """
        missing = self.get_missing_variables(**kwargs)
        if missing:
            raise KeyError(f"Missing template variables: {', '.join(missing)}")
        return self.template.format(**kwargs)

    def get_missing_variables(self, **kwargs: Any) -> list[str]:
        """Get list of variables not provided.

        Args:
            **kwargs: Provided variables.

        Returns:
            List of missing variable names.
        """
        return [v for v in self.variables if v not in kwargs]


# =============================================================================
# COMPLETION
# =============================================================================


COMPLETION_INSTRUCTION = PromptTemplate(
    name="completion_instruction",
    description="Trailing instruction naming the completion marker",
    template="When you have completed all requirements, output the completion marker: {marker}\n",
    variables=["marker"],
)


# =============================================================================
# MULTI-TASK
# =============================================================================


TASK_CONTEXT = PromptTemplate(
    name="task_context",
    description="Parent spec context for a single sub-task prompt",
    template="""## Context
This task is part of "{spec_title}".

{spec_objective}

""",
    variables=["spec_title", "spec_objective"],
)


TASK_DEPENDENCIES = PromptTemplate(
    name="task_dependencies",
    description="Note listing tasks that completed before this one",
    template="""## Dependencies
The following tasks have already been completed: {dependencies}
Build on their results instead of redoing their work.

""",
    variables=["dependencies"],
)
