"""
Wire models exchanged with the problem source and the result sink
"""

from .models import (
    ProblemOrder,
    Problem,
    ActionPayload,
    SolutionOptions,
    Solution
)


__all__ = [
    "ProblemOrder",
    "Problem",
    "ActionPayload",
    "SolutionOptions",
    "Solution"
]
