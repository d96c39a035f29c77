"""Spatial alignment: resolve content poses against real-world reference frames."""

from .control.errors import AlignmentConfigurationError, UnexpectedBranchError
from .control.frame import ReferenceFrame
from .control.pose import Pose, identity_pose, infinite_accuracy
from .control.state import AlignmentState
from .control.strategy import AlignmentStrategy, ResolveOutcome
from .strategies import MultiParentAlignmentMode, MultiParentAlignmentStrategy

__all__ = [
    "AlignmentConfigurationError",
    "AlignmentState",
    "AlignmentStrategy",
    "MultiParentAlignmentMode",
    "MultiParentAlignmentStrategy",
    "Pose",
    "ReferenceFrame",
    "ResolveOutcome",
    "UnexpectedBranchError",
    "identity_pose",
    "infinite_accuracy",
]
