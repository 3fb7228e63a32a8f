# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Constraint propagation from filled slots to a target slot.

A constraint map is {position_in_slot: required_letter}. Only filled
slots of the opposite direction can impose constraints.
"""

import logging
from typing import Dict, Sequence

from models import Slot, FilledSlot, Template

logger = logging.getLogger(__name__)


def calculate_constraints(
    target: Slot,
    filled_slots: Sequence[FilledSlot],
    template: Template
) -> Dict[int, str]:
    """
    Calculate which letters are already fixed by intersecting words.

    When two filled slots claim the same position the later one in
    `filled_slots` wins; the collision is logged, not raised.

    Args:
        target: Slot to compute constraints for
        filled_slots: Accepted answers, in fill order
        template: Template the slot indices refer to

    Returns:
        Mapping of 0-based position to required letter
    """
    constraints: Dict[int, str] = {}
    if not filled_slots:
        return constraints

    crossing = [
        (template.slots[f.slot_index], f)
        for f in filled_slots
        if template.slots[f.slot_index].direction == target.direction.opposite
    ]

    for i in range(target.length):
        row, col = target.cell(i)
        for slot, filled in crossing:
            offset = slot.offset_of(row, col)
            if offset is None or offset >= len(filled.answer):
                continue
            letter = filled.answer[offset]
            previous = constraints.get(i)
            if previous is not None and previous != letter:
                logger.warning(
                    f"Conflicting constraint at position {i} of slot {target.id}: "
                    f"'{previous}' replaced by '{letter}' from slot {slot.id}"
                )
            constraints[i] = letter

    return constraints


def constraint_pattern(length: int, constraints: Dict[int, str]) -> str:
    """Render constraints as a pattern with '.' for free positions."""
    return "".join(constraints.get(i, ".") for i in range(length))


def first_violation(answer: str, constraints: Dict[int, str]):
    """Return (position, required, actual) for the first mismatch, or None."""
    for position in sorted(constraints):
        required = constraints[position]
        actual = answer[position] if position < len(answer) else None
        if actual != required:
            return position, required, actual
    return None

