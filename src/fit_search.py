# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Fit search: the largest candidate subset a layout placer fully places.

The placer is a black box, so the search probes it with random
permutations and shrinking prefixes, bounded by fit_attempts trials.
"""

import logging
import random
from typing import Callable, Dict, List, Optional

from layout_placer import Layout

logger = logging.getLogger(__name__)

MIN_SUBSET = 3
DEFAULT_FIT_ATTEMPTS = 6

Placer = Callable[[List[Dict[str, str]]], Layout]


def _answer(word: Dict[str, str]) -> str:
    return str(word.get('answer', '')).upper()


def placed_entries(words: List[Dict[str, str]], layout: Layout) -> List[Dict[str, str]]:
    """
    Map placed words back to their candidate entries, in placer order.
    Duplicate answers are matched one-to-one.
    """
    remaining = list(words)
    entries = []
    for placed in layout.placed:
        for i, word in enumerate(remaining):
            if _answer(word) == placed.answer.upper():
                entries.append(remaining.pop(i))
                break
    return entries


def fit_subset(
    candidates: List[Dict[str, str]],
    placer: Placer,
    desired_count: Optional[int] = None,
    fit_attempts: int = DEFAULT_FIT_ATTEMPTS,
    rng: Optional[random.Random] = None
) -> List[Dict[str, str]]:
    """
    Find the largest subset of candidates the placer accepts in full.

    Args:
        candidates: [{'answer': ..., 'clue': ...}]
        placer: Callable returning a Layout for a word list
        desired_count: Upper bound on the result size (default: all)
        fit_attempts: Number of randomized trials
        rng: Random source; pass a seeded Random for repeatable runs

    Returns:
        Accepted subset: at most desired_count words and at least 3
        unless fewer than 3 candidates were given
    """
    if not candidates:
        return []

    rng = rng or random.Random()
    target = len(candidates) if desired_count is None else desired_count

    first = placer(candidates)
    first_placed = placed_entries(candidates, first)
    if len(first_placed) == len(candidates) and len(candidates) <= target:
        logger.info(f"All {len(candidates)} words placed on the first try")
        return list(candidates)

    best_partial: List[Dict[str, str]] = []
    start_count = min(len(candidates), target)

    for attempt in range(1, fit_attempts + 1):
        shuffled = list(candidates)
        rng.shuffle(shuffled)

        for count in range(start_count, MIN_SUBSET - 1, -1):
            subset = shuffled[:count]
            layout = placer(subset)
            placed = placed_entries(subset, layout)

            if len(placed) == count:
                logger.info(f"Attempt {attempt}, count {count}: all words placed")
                return subset

            if len(placed) >= MIN_SUBSET and len(placed) > len(best_partial):
                best_partial = placed
                logger.debug(
                    f"Attempt {attempt}, count {count}: {len(placed)} placed (new best partial)"
                )

    if best_partial:
        logger.info(f"No full fit after {fit_attempts} attempts, using best partial of {len(best_partial)}")
        return best_partial

    if len(first_placed) >= MIN_SUBSET:
        logger.warning("Fallback: using first 3 words placed by the initial layout")
        return first_placed[:MIN_SUBSET]

    logger.warning("Final fallback: using first 3 candidates")
    return list(candidates[:MIN_SUBSET])
