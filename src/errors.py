# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Error taxonomy for the template filler.

Every failure is local to one request. Core functions raise these
exceptions; InteractiveFiller turns them into StepResult values.
"""

from typing import Optional


class FillError(Exception):
    """Base class for all recoverable filler failures."""

    code = "fill_error"

    def __init__(self, message: str, detail: Optional[dict] = None):
        self.message = message
        self.detail = detail or {}
        super().__init__(message)


class TemplateNotFound(FillError):
    """Raised when a template key is absent from the template source."""

    code = "template_not_found"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Template '{key}' not found", {"key": key})


class InvalidTemplateData(FillError):
    """Raised when a grid or slot description is malformed."""

    code = "invalid_template_data"


class InvalidFillState(FillError):
    """Raised when a round-tripped fill state is inconsistent."""

    code = "invalid_fill_state"


class GenerationFailure(FillError):
    """Raised when the word generator is unavailable or errored."""

    code = "generation_failure"


class InvalidProposedAnswer(FillError):
    """Raised for wrong length, non-letters or a constraint violation."""

    code = "invalid_proposed_answer"


class BacktrackOutOfRange(FillError):
    """Raised when a backtrack target is negative or ahead of progress."""

    code = "backtrack_out_of_range"

    def __init__(self, target_index: int, current_index: int):
        self.target_index = target_index
        self.current_index = current_index
        super().__init__(
            f"Cannot backtrack to slot {target_index}: "
            f"valid targets are 0..{current_index}",
            {"target_index": target_index, "current_index": current_index},
        )
