"""Alignment resolution states."""

from __future__ import annotations

from enum import Enum


class AlignmentState(Enum):
    """Outcome of the most recent resolution attempt.

    UNRESOLVED:
      No basis for a pose (for example no reference frames configured).
    TRACKING:
      A valid, up-to-date pose was produced.
    INHIBITED:
      Resolution was attempted but failed this cycle (for example no
      reference viewpoint). Transient; the next attempt may succeed.
    """

    UNRESOLVED = "unresolved"
    TRACKING = "tracking"
    INHIBITED = "inhibited"
