# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Request-level entry points for interactive template filling.

Each method handles one stateless request: it rebuilds the FillState
from the caller's payload, applies one transition and returns a
StepResult. Failures never raise; they come back as a StepResult that
carries the caller's original payload unchanged.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from errors import FillError
from fill_session import (
    advance, backtrack, completed_puzzle, render, state_from_payload, state_to_payload,
)
from models import FillState, FilledSlot, RenderedState, Template
from template_parser import TemplateSource
from word_acquisition import acquire, accept_manual_answer


@dataclass
class StepResult:
    """Outcome of one request: either a new state or an error."""
    ok: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    rendered: Optional[RenderedState] = None
    filled_slot: Optional[FilledSlot] = None
    puzzle: Optional[Dict[str, Any]] = None
    error_code: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, exc: FillError, payload: Dict[str, Any]) -> 'StepResult':
        return cls(ok=False, payload=payload, error_code=exc.code, error=exc.message)


class InteractiveFiller:
    """
    Stateless facade over the fill engine.

    Usage:
        filler = InteractiveFiller(TemplateSource.from_env(), generator)
        result = filler.generate_step('mini', filled_slots=[], current_index=0)
        if result.ok:
            payload = result.payload  # hand back to the caller
    """

    def __init__(
        self,
        templates: TemplateSource,
        generator: Optional[object] = None,
        theme: str = "General",
        difficulty: str = "Medium",
        logger: Optional[logging.Logger] = None
    ):
        self.templates = templates
        self.generator = generator
        self.theme = theme
        self.difficulty = difficulty
        self.logger = logger if logger else logging.getLogger(__name__)

    @staticmethod
    def _request_payload(template_key, filled_slots, current_index) -> Dict[str, Any]:
        payload = {
            'template_key': template_key,
            'filled_slots': list(filled_slots or []),
        }
        if current_index is not None:
            payload['current_slot_index'] = current_index
        return payload

    def _load(self, template_key: str, filled_slots, current_index) -> FillState:
        template = self.templates.get(template_key)
        return state_from_payload(template, filled_slots, current_index)

    def _success(self, state: FillState, **extra) -> StepResult:
        return StepResult(ok=True, payload=state_to_payload(state), rendered=render(state), **extra)

    def _fail(self, exc: FillError, payload: Dict[str, Any], action: str) -> StepResult:
        self.logger.warning(f"{action} failed [{exc.code}]: {exc.message}")
        return StepResult.failure(exc, payload)

    def render(
        self,
        template_key: str,
        filled_slots: Optional[List[Dict[str, Any]]] = None,
        current_index: Optional[int] = None
    ) -> StepResult:
        """Render the caller's state without changing it."""
        payload = self._request_payload(template_key, filled_slots, current_index)
        try:
            state = self._load(template_key, filled_slots, current_index)
        except FillError as e:
            return self._fail(e, payload, "Render")
        return self._success(state)

    def generate_step(
        self,
        template_key: str,
        filled_slots: Optional[List[Dict[str, Any]]] = None,
        current_index: Optional[int] = None,
        hint: Optional[str] = None,
        theme: Optional[str] = None,
        difficulty: Optional[str] = None
    ) -> StepResult:
        """Generate an answer for the current slot and advance."""
        payload = self._request_payload(template_key, filled_slots, current_index)
        try:
            state = self._load(template_key, filled_slots, current_index)
            if state.is_complete:
                return self._success(state)
            template: Template = state.template
            filled = acquire(
                template,
                state.current_index,
                state.filled,
                self.generator,
                theme=theme or template.theme or self.theme,
                difficulty=difficulty or template.difficulty or self.difficulty,
                hint=hint,
            )
            new_state = advance(state, filled)
        except FillError as e:
            return self._fail(e, payload, "Word generation")
        self.logger.info(
            f"Template '{template_key}': slot {filled.slot_index} filled with {filled.answer} "
            f"({new_state.current_index}/{new_state.total})"
        )
        return self._success(new_state, filled_slot=filled)

    def submit_answer(
        self,
        template_key: str,
        answer: str,
        clue: str,
        filled_slots: Optional[List[Dict[str, Any]]] = None,
        current_index: Optional[int] = None
    ) -> StepResult:
        """Advance with a caller-typed answer instead of a generated one."""
        payload = self._request_payload(template_key, filled_slots, current_index)
        try:
            state = self._load(template_key, filled_slots, current_index)
            if state.is_complete:
                return self._success(state)
            filled = accept_manual_answer(
                state.template, state.current_index, state.filled, answer, clue
            )
            new_state = advance(state, filled)
        except FillError as e:
            return self._fail(e, payload, "Manual answer")
        return self._success(new_state, filled_slot=filled)

    def backtrack(
        self,
        template_key: str,
        target_index: int,
        filled_slots: Optional[List[Dict[str, Any]]] = None,
        current_index: Optional[int] = None
    ) -> StepResult:
        """Drop every filled slot from target_index onward."""
        payload = self._request_payload(template_key, filled_slots, current_index)
        try:
            state = self._load(template_key, filled_slots, current_index)
            new_state = backtrack(state, target_index)
        except FillError as e:
            return self._fail(e, payload, "Backtrack")
        return self._success(new_state)

    def export(
        self,
        template_key: str,
        filled_slots: Optional[List[Dict[str, Any]]] = None,
        current_index: Optional[int] = None
    ) -> StepResult:
        """Across/down clue lists for a completed puzzle."""
        payload = self._request_payload(template_key, filled_slots, current_index)
        try:
            state = self._load(template_key, filled_slots, current_index)
            puzzle = completed_puzzle(state)
        except FillError as e:
            return self._fail(e, payload, "Export")
        return self._success(state, puzzle=puzzle)
