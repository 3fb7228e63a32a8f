# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Fill session state transitions.

The engine keeps no session. Every function takes a FillState and
returns a new one (or a rendering of it); the caller round-trips the
state between requests as a payload:

    {"template_key": ..., "current_slot_index": 2,
     "filled_slots": [{"slot_index": 0, "answer": ..., "clue": ...}, ...]}
"""

import logging
from typing import Any, Dict, List, Optional

from constraints import calculate_constraints, constraint_pattern
from errors import BacktrackOutOfRange, InvalidFillState
from models import Direction, FilledSlot, FillState, RenderedState, Template
from word_acquisition import validate_answer

logger = logging.getLogger(__name__)

BLOCK = "#"


def new_state(template: Template) -> FillState:
    """Fresh state positioned at the first slot."""
    return FillState(template=template)


def advance(state: FillState, filled_slot: FilledSlot) -> FillState:
    """
    Record an accepted answer for the current slot and move on.

    Raises:
        InvalidFillState: State is complete or the slot index is not current
        InvalidProposedAnswer: Answer does not fit the slot
    """
    if state.is_complete:
        raise InvalidFillState("All slots are already filled")
    if filled_slot.slot_index != state.current_index:
        raise InvalidFillState(
            f"Cannot fill slot {filled_slot.slot_index}: current slot is {state.current_index}"
        )

    slot = state.template.slots[state.current_index]
    constraints = calculate_constraints(slot, state.filled, state.template)
    answer = validate_answer(filled_slot.answer, slot, constraints)
    accepted = FilledSlot(filled_slot.slot_index, answer, filled_slot.clue)

    return FillState(
        template=state.template,
        filled=state.filled + (accepted,),
        current_index=state.current_index + 1,
    )


def backtrack(state: FillState, target_index: int) -> FillState:
    """
    Discard every filled slot from target_index onward.

    Backtracking to the current index returns an equal state. Forward
    jumps and negative targets are rejected.

    Raises:
        BacktrackOutOfRange: target_index is not an integer, < 0 or > current_index
    """
    try:
        target_index = int(target_index)
    except (TypeError, ValueError):
        raise BacktrackOutOfRange(target_index, state.current_index)
    if target_index < 0 or target_index > state.current_index:
        raise BacktrackOutOfRange(target_index, state.current_index)
    if target_index == state.current_index:
        return state

    logger.info(f"Backtracking from slot {state.current_index} to slot {target_index}")
    return FillState(
        template=state.template,
        filled=tuple(f for f in state.filled if f.slot_index < target_index),
        current_index=target_index,
    )


def build_grid_state(template: Template, filled_slots) -> List[List[str]]:
    """
    Place filled answers on the grid.

    Blocked cells are never overwritten. When two answers disagree on a
    cell the later one wins and the collision is logged.
    """
    grid = [
        [BLOCK if template.grid.is_blocked(r, c) else "" for c in range(template.cols)]
        for r in range(template.rows)
    ]

    for filled in filled_slots:
        slot = template.slots[filled.slot_index]
        for i, letter in enumerate(filled.answer):
            row, col = slot.cell(i)
            if not template.grid.is_valid_position(row, col) or grid[row][col] == BLOCK:
                continue
            if grid[row][col] and grid[row][col] != letter:
                logger.warning(
                    f"Letter collision at ({row}, {col}): '{grid[row][col]}' "
                    f"overwritten by '{letter}' from slot {slot.id}"
                )
            grid[row][col] = letter

    return grid


def render(state: FillState) -> RenderedState:
    """Pure view of the state: grid, current constraints and progress."""
    grid = build_grid_state(state.template, state.filled)
    slot = state.current_slot
    constraints: Dict[int, str] = {}
    pattern = ""
    if slot is not None:
        constraints = calculate_constraints(slot, state.filled, state.template)
        pattern = constraint_pattern(slot.length, constraints)

    total = state.total
    return RenderedState(
        grid=grid,
        constraints=constraints,
        pattern=pattern,
        current_slot=slot,
        progress={
            'filled': len(state.filled),
            'total': total,
            'current_index': state.current_index,
            'complete': state.is_complete,
            'percent': round(100.0 * len(state.filled) / total, 1) if total else 100.0,
        },
    )


def clue_numbers(template: Template) -> Dict[int, int]:
    """
    Standard crossword numbering: cells scanned row-major, each cell
    that starts a slot gets the next number.

    Returns:
        Mapping of slot index to clue number
    """
    starts = sorted({(s.start_row, s.start_col) for s in template.slots})
    number_at = {cell: n for n, cell in enumerate(starts, start=1)}
    return {
        index: number_at[(s.start_row, s.start_col)]
        for index, s in enumerate(template.slots)
    }


def completed_puzzle(state: FillState) -> Dict[str, Any]:
    """
    Export a complete state as across/down clue lists.

    Raises:
        InvalidFillState: If slots remain unfilled
    """
    if not state.is_complete:
        raise InvalidFillState(
            f"Puzzle is not complete: {len(state.filled)} of {state.total} slots filled"
        )

    numbers = clue_numbers(state.template)
    across: List[Dict[str, Any]] = []
    down: List[Dict[str, Any]] = []
    for filled in state.filled:
        slot = state.template.slots[filled.slot_index]
        entry = {
            'number': numbers[filled.slot_index],
            'clue': filled.clue,
            'answer': filled.answer,
            'startx': slot.start_col + 1,
            'starty': slot.start_row + 1,
            'length': slot.length,
        }
        (across if slot.direction == Direction.ACROSS else down).append(entry)

    across.sort(key=lambda e: e['number'])
    down.sort(key=lambda e: e['number'])
    return {
        'name': state.template.name,
        'rows': state.template.rows,
        'cols': state.template.cols,
        'grid': build_grid_state(state.template, state.filled),
        'across': across,
        'down': down,
    }


def state_to_payload(state: FillState) -> Dict[str, Any]:
    """Serialize a state for the caller to hold."""
    return {
        'template_key': state.template.key,
        'current_slot_index': state.current_index,
        'filled_slots': [f.to_dict() for f in state.filled],
    }


def state_from_payload(
    template: Template,
    filled_slots: Optional[List[Dict[str, Any]]],
    current_index: Optional[int] = None
) -> FillState:
    """
    Rebuild and validate a caller-held state.

    Args:
        template: Template the state belongs to
        filled_slots: [{slot_index, answer, clue}], any order
        current_index: Current slot; defaults to len(filled_slots)

    Raises:
        InvalidFillState: If the entries are not exactly the prefix
            0..current_index-1 or an answer does not fit its slot
    """
    entries = filled_slots or []
    if not isinstance(entries, list):
        raise InvalidFillState("'filled_slots' must be a list")

    parsed = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise InvalidFillState("Each filled slot must be a mapping")
        try:
            index = int(entry['slot_index'])
        except (KeyError, TypeError, ValueError):
            raise InvalidFillState(f"Filled slot has no valid slot_index: {entry!r}")
        if not 0 <= index < len(template.slots):
            raise InvalidFillState(f"Filled slot index {index} out of range")
        answer = str(entry.get('answer') or "").strip().upper()
        slot = template.slots[index]
        if not answer.isalpha() or not answer.isascii() or len(answer) != slot.length:
            raise InvalidFillState(
                f"Filled slot {index} answer {answer!r} does not fit a {slot.length}-letter slot"
            )
        parsed.append(FilledSlot(index, answer, str(entry.get('clue') or "")))

    parsed.sort(key=lambda f: f.slot_index)
    if current_index is None:
        current_index = len(parsed)
    try:
        current_index = int(current_index)
    except (TypeError, ValueError):
        raise InvalidFillState(f"Invalid current slot index: {current_index!r}")
    if not 0 <= current_index <= len(template.slots):
        raise InvalidFillState(
            f"Current slot index {current_index} out of range 0..{len(template.slots)}"
        )
    if [f.slot_index for f in parsed] != list(range(current_index)):
        raise InvalidFillState(
            f"Filled slots must cover exactly slots 0..{current_index - 1}"
        )

    return FillState(template=template, filled=tuple(parsed), current_index=current_index)
