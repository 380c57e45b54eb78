"""
taskspec - Markdown task specifications for autonomous coding loops.

Parse, validate and compile spec documents into execution-ready prompts.
"""

__version__ = "0.1.0"

from taskspec.instructions import (
    SpecDocument,
    SpecParser,
    ValidationReport,
    parse_spec,
    to_markdown,
    to_prompt,
    validate,
)

__all__ = [
    "SpecDocument",
    "SpecParser",
    "ValidationReport",
    "__version__",
    "parse_spec",
    "to_markdown",
    "to_prompt",
    "validate",
]
