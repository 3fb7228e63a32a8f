# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Slot detection for template grids.

Scans rows left to right for ACROSS runs, then columns top to bottom
for DOWN runs. Runs shorter than MIN_SLOT_LENGTH never become slots.
"""

import logging
from typing import List, Tuple, Iterable

from models import Grid, Slot, Direction, MIN_SLOT_LENGTH

logger = logging.getLogger(__name__)


def _runs(cells: Iterable[bool]) -> List[Tuple[int, int]]:
    """Return (start, length) for every run of open cells."""
    runs = []
    start = None
    length = 0
    for i, blocked in enumerate(cells):
        if blocked:
            if start is not None:
                runs.append((start, length))
            start = None
            length = 0
        else:
            if start is None:
                start = i
            length += 1
    if start is not None:
        runs.append((start, length))
    return runs


def detect_slots(grid: Grid) -> List[Slot]:
    """
    Identify all word slots in the grid.

    All ACROSS slots come first in row-major order, then all DOWN slots
    in column-major order. Ids are 1-based in that order.

    Args:
        grid: Template grid

    Returns:
        Ordered list of slots
    """
    slots: List[Slot] = []
    next_id = 1

    for row in range(grid.rows):
        for start, length in _runs(grid.blocked[row]):
            if length >= MIN_SLOT_LENGTH:
                slots.append(Slot(
                    id=next_id,
                    start_row=row,
                    start_col=start,
                    direction=Direction.ACROSS,
                    length=length,
                ))
                next_id += 1

    for col in range(grid.cols):
        column = (grid.blocked[row][col] for row in range(grid.rows))
        for start, length in _runs(column):
            if length >= MIN_SLOT_LENGTH:
                slots.append(Slot(
                    id=next_id,
                    start_row=start,
                    start_col=col,
                    direction=Direction.DOWN,
                    length=length,
                ))
                next_id += 1

    across = sum(1 for s in slots if s.direction == Direction.ACROSS)
    logger.debug(
        f"Detected {len(slots)} slots in {grid.rows}x{grid.cols} grid "
        f"({across} across, {len(slots) - across} down)"
    )
    return slots
