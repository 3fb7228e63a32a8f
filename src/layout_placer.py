# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Layout placement adapter.

The placement algorithm itself lives in the crossword-layout-generator
npm package; NodeLayoutPlacer runs it through node and normalizes the
result into a Layout. Any callable with the same signature can stand in
for it (see fit_search.fit_subset).
"""

import base64
import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MAX_GRID_SIZE = 15
DEFAULT_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "layout_placer.js"


@dataclass
class PlacedWord:
    """A word the placer put on the grid (1-based start)."""
    answer: str
    clue: str = ""
    startx: int = 1
    starty: int = 1
    orientation: str = "across"


@dataclass
class Layout:
    """Placer output. `placed` never holds more words than were given."""
    rows: int = 0
    cols: int = 0
    table: List[List[str]] = field(default_factory=list)
    placed: List[PlacedWord] = field(default_factory=list)

    @property
    def placed_count(self) -> int:
        return len(self.placed)

    def fits(self, max_size: int = MAX_GRID_SIZE) -> bool:
        return self.rows <= max_size and self.cols <= max_size


def empty_layout() -> Layout:
    return Layout(rows=10, cols=10, table=[[''] * 10 for _ in range(10)], placed=[])


def compact_layout(layout: Layout) -> Layout:
    """Rebase coordinates so the minimum startx/starty is (1, 1)."""
    if not layout.placed:
        return layout
    min_x = min(w.startx for w in layout.placed)
    min_y = min(w.starty for w in layout.placed)
    if min_x == 1 and min_y == 1:
        return layout
    return Layout(
        rows=layout.rows,
        cols=layout.cols,
        table=layout.table,
        placed=[
            PlacedWord(
                answer=w.answer,
                clue=w.clue,
                startx=w.startx - min_x + 1,
                starty=w.starty - min_y + 1,
                orientation=w.orientation,
            )
            for w in layout.placed
        ],
    )


def parse_layout(data: Dict[str, Any]) -> Layout:
    """
    Convert raw placer output into a Layout.

    Words with orientation 'none' were not placed and are dropped, as are
    entries that are not mappings.

    Raises:
        ValueError: data is not a JSON object
    """
    if not isinstance(data, dict):
        raise ValueError(f"Placer output must be a JSON object, got {type(data).__name__}")
    placed = []
    for word in data.get('result') or []:
        if not isinstance(word, dict):
            continue
        orientation = str(word.get('orientation') or 'none').lower()
        if orientation == 'none':
            continue
        placed.append(PlacedWord(
            answer=str(word.get('answer', '')).upper(),
            clue=word.get('clue') or '',
            startx=int(word.get('startx') or 1),
            starty=int(word.get('starty') or 1),
            orientation=orientation,
        ))
    layout = Layout(
        rows=int(data.get('rows') or 0),
        cols=int(data.get('cols') or 0),
        table=data.get('table') or [],
        placed=placed,
    )
    return compact_layout(layout)


class NodeLayoutPlacer:
    """
    Runs the node layout generator on a word list.

    Usage:
        placer = NodeLayoutPlacer()
        layout = placer([{'answer': 'WATER', 'clue': 'H2O'}, ...])
    """

    def __init__(
        self,
        script_path: Optional[str] = None,
        node_binary: str = "node",
        timeout: float = 30.0,
        max_grid_size: int = MAX_GRID_SIZE,
        smart_order: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        self.script_path = Path(script_path) if script_path else DEFAULT_SCRIPT
        self.node_binary = node_binary
        self.timeout = timeout
        self.max_grid_size = max_grid_size
        self.smart_order = smart_order
        self.logger = logger if logger else logging.getLogger(__name__)
        self.stats = {"calls": 0, "failures": 0, "oversize": 0}

    def __call__(self, words: List[Dict[str, str]]) -> Layout:
        """
        Place words; failures and oversize layouts place nothing.

        Args:
            words: [{'answer': ..., 'clue': ...}]

        Returns:
            Layout with the words that were placed
        """
        self.stats["calls"] += 1
        ordered = list(words)
        if self.smart_order:
            # Longest words first intersect better
            ordered.sort(key=lambda w: -len(str(w.get('answer', ''))))

        payload = json.dumps([
            {'clue': w.get('clue', ''), 'answer': str(w.get('answer', '')).upper()}
            for w in ordered
        ])
        encoded = base64.b64encode(payload.encode('utf-8')).decode('ascii')

        try:
            completed = subprocess.run(
                [self.node_binary, str(self.script_path), encoded],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
            layout = parse_layout(json.loads(completed.stdout))
        except (OSError, subprocess.SubprocessError, TypeError, ValueError) as e:
            self.stats["failures"] += 1
            self.logger.error(f"Layout generation failed: {e}")
            return empty_layout()

        if not layout.fits(self.max_grid_size):
            self.stats["oversize"] += 1
            self.logger.debug(
                f"Layout {layout.rows}x{layout.cols} exceeds "
                f"{self.max_grid_size}x{self.max_grid_size}, rejecting"
            )
            return Layout(rows=layout.rows, cols=layout.cols, table=layout.table, placed=[])

        return layout
