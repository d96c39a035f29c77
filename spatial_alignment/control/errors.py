"""Faults raised by the alignment engine.

Resolution failures are never raised; they only show up as AlignmentState.
Invalid arguments are reported with the builtin ValueError.
"""

from __future__ import annotations


class AlignmentConfigurationError(RuntimeError):
    """A required collaborator is missing; the strategy cannot operate."""


class UnexpectedBranchError(RuntimeError):
    """A dispatch reached a case with no implementation."""
