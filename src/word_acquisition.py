# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Word acquisition for a single slot.

Asks a word generator for an answer that satisfies the slot's
constraints and validates whatever comes back. Nothing here mutates
caller state: a failure raises and the caller re-issues the step.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from constraints import calculate_constraints, constraint_pattern, first_violation
from errors import FillError, GenerationFailure, InvalidFillState, InvalidProposedAnswer
from models import Direction, FilledSlot, Slot, Template

logger = logging.getLogger(__name__)

LETTERS_ONLY = re.compile(r'^[A-Z]+$')


@dataclass
class WordRequest:
    """Everything a generator needs to propose one answer."""
    length: int
    direction: Direction
    constraints: Dict[int, str] = field(default_factory=dict)
    theme: str = "General"
    difficulty: str = "Medium"
    hint: Optional[str] = None
    used_answers: List[str] = field(default_factory=list)

    @property
    def pattern(self) -> str:
        return constraint_pattern(self.length, self.constraints)


def validate_answer(answer: str, slot: Slot, constraints: Dict[int, str]) -> str:
    """
    Normalize and validate a proposed answer.

    Args:
        answer: Proposed answer (any case, surrounding whitespace allowed)
        slot: Slot the answer is for
        constraints: Constraint map for the slot

    Returns:
        Upper-cased answer

    Raises:
        InvalidProposedAnswer: On non-letters, wrong length or a
            constraint violation
    """
    if not isinstance(answer, str):
        raise InvalidProposedAnswer(f"Answer must be a string, got {type(answer).__name__}")

    normalized = answer.strip().upper()
    if not LETTERS_ONLY.match(normalized):
        raise InvalidProposedAnswer(
            f"Answer must be letters only: {normalized!r}",
            {'answer': normalized},
        )
    if len(normalized) != slot.length:
        raise InvalidProposedAnswer(
            f"Answer length mismatch: need {slot.length}, got {len(normalized)} ({normalized})",
            {'answer': normalized, 'expected_length': slot.length},
        )

    violation = first_violation(normalized, constraints)
    if violation:
        position, required, actual = violation
        raise InvalidProposedAnswer(
            f"Constraint violation: position {position + 1} must be "
            f"'{required}', got '{actual}'",
            {'answer': normalized, 'position': position, 'required': required},
        )
    return normalized


def _target_slot(template: Template, target_index: int) -> Slot:
    if not 0 <= target_index < len(template.slots):
        raise InvalidFillState(
            f"Slot index {target_index} out of range for {len(template.slots)} slots"
        )
    return template.slots[target_index]


def acquire(
    template: Template,
    target_index: int,
    filled_slots: Sequence[FilledSlot],
    generator,
    theme: str = "General",
    difficulty: str = "Medium",
    hint: Optional[str] = None
) -> FilledSlot:
    """
    Generate and validate an answer for one slot.

    Args:
        template: Template being filled
        target_index: Index of the slot to fill
        filled_slots: Slots already filled, in fill order
        generator: Object with propose_word(WordRequest) -> {answer, clue}
        theme: Puzzle theme
        difficulty: Puzzle difficulty
        hint: Optional clue direction from the caller

    Returns:
        FilledSlot ready for advance()

    Raises:
        GenerationFailure: Generator unavailable, errored or malformed reply
        InvalidProposedAnswer: Reply failed validation
    """
    if generator is None:
        raise GenerationFailure("No word generator configured")

    slot = _target_slot(template, target_index)
    constraints = calculate_constraints(slot, filled_slots, template)
    request = WordRequest(
        length=slot.length,
        direction=slot.direction,
        constraints=constraints,
        theme=theme,
        difficulty=difficulty,
        hint=hint or None,
        used_answers=[f.answer for f in filled_slots],
    )
    logger.info(
        f"Requesting word for slot {slot.id} ({slot.direction.value}, "
        f"{slot.length} letters, pattern {request.pattern})"
    )

    try:
        proposal = generator.propose_word(request)
    except FillError:
        raise
    except Exception as e:
        logger.error(f"Word generator error: {e}", exc_info=True)
        raise GenerationFailure(f"Word generator error: {e}")

    if not isinstance(proposal, dict):
        raise GenerationFailure("Word generator returned no proposal")
    answer = proposal.get('answer')
    clue = proposal.get('clue')
    if not answer or not isinstance(clue, str) or not clue.strip():
        raise GenerationFailure("Invalid response structure: missing answer or clue")

    normalized = validate_answer(answer, slot, constraints)
    logger.info(f"Slot {slot.id} accepted {normalized}")
    return FilledSlot(slot_index=target_index, answer=normalized, clue=clue.strip())


def accept_manual_answer(
    template: Template,
    target_index: int,
    filled_slots: Sequence[FilledSlot],
    answer: str,
    clue: str
) -> FilledSlot:
    """Validate a caller-typed answer with the same rules as generated ones."""
    slot = _target_slot(template, target_index)
    constraints = calculate_constraints(slot, filled_slots, template)
    normalized = validate_answer(answer, slot, constraints)
    if not clue or not clue.strip():
        raise InvalidProposedAnswer("Clue cannot be empty")
    return FilledSlot(slot_index=target_index, answer=normalized, clue=clue.strip())
