"""
Exception hierarchy for CODEWRIGHT.

Parsing failures are raised synchronously by the core and caught by the
tool execution wrapper, which turns them into failed tool results.
"""

from __future__ import annotations


class CodewrightError(Exception):
    """Base class for all CODEWRIGHT errors."""
    pass


class ParseError(CodewrightError, ValueError):
    """A hunk header or diff could not be parsed."""
    pass


class PatchError(CodewrightError):
    """A strict patch violates the ordering / bounds precondition."""
    pass


class ToolError(CodewrightError):
    """A tool handler failed or received invalid parameters."""
    pass


class BudgetExceededError(CodewrightError):
    pass
