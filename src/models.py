"""
Data models for the template filler.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Tuple


MIN_SLOT_LENGTH = 3


class Direction(Enum):
    ACROSS = "across"
    DOWN = "down"

    @property
    def opposite(self) -> 'Direction':
        return Direction.DOWN if self is Direction.ACROSS else Direction.ACROSS


@dataclass(frozen=True)
class Grid:
    """Rectangular grid of blocked (True) and open (False) cells."""
    rows: int
    cols: int
    blocked: Tuple[Tuple[bool, ...], ...] = ()

    def __post_init__(self):
        if not self.blocked:
            object.__setattr__(
                self, 'blocked',
                tuple(tuple(False for _ in range(self.cols)) for _ in range(self.rows))
            )

    @classmethod
    def from_rows(cls, rows: List[List[bool]]) -> 'Grid':
        """Build a grid from a list of boolean rows."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        return cls(
            rows=height,
            cols=width,
            blocked=tuple(tuple(bool(c) for c in row) for row in rows),
        )

    def is_blocked(self, row: int, col: int) -> bool:
        return self.blocked[row][col]

    def is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within grid bounds."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def count_blocks(self) -> int:
        return sum(1 for row in self.blocked for cell in row if cell)


@dataclass(frozen=True)
class Slot:
    """A fillable word position. Identity is (start_row, start_col, direction)."""
    id: int
    start_row: int
    start_col: int
    direction: Direction
    length: int

    def __hash__(self):
        return hash((self.start_row, self.start_col, self.direction))

    def __eq__(self, other):
        if not isinstance(other, Slot):
            return False
        return (self.start_row == other.start_row and
                self.start_col == other.start_col and
                self.direction == other.direction)

    def cell(self, i: int) -> Tuple[int, int]:
        """Absolute (row, col) of position i in this slot."""
        if self.direction == Direction.ACROSS:
            return (self.start_row, self.start_col + i)
        return (self.start_row + i, self.start_col)

    @property
    def cells(self) -> List[Tuple[int, int]]:
        return [self.cell(i) for i in range(self.length)]

    def offset_of(self, row: int, col: int) -> Optional[int]:
        """
        Position of (row, col) inside this slot, or None if the cell
        is outside its span.
        """
        if self.direction == Direction.ACROSS:
            if row == self.start_row and self.start_col <= col < self.start_col + self.length:
                return col - self.start_col
        else:
            if col == self.start_col and self.start_row <= row < self.start_row + self.length:
                return row - self.start_row
        return None


@dataclass(frozen=True)
class Template:
    """A grid plus its ordered slots. The slot order is the fill order."""
    name: str
    grid: Grid
    slots: Tuple[Slot, ...]
    key: Optional[str] = None
    theme: Optional[str] = None
    difficulty: str = "Medium"

    @property
    def rows(self) -> int:
        return self.grid.rows

    @property
    def cols(self) -> int:
        return self.grid.cols


@dataclass(frozen=True)
class FilledSlot:
    """An accepted answer for one slot."""
    slot_index: int
    answer: str
    clue: str

    def to_dict(self) -> Dict[str, object]:
        return {
            'slot_index': self.slot_index,
            'answer': self.answer,
            'clue': self.clue,
        }


@dataclass(frozen=True)
class FillState:
    """
    Caller-held progress through a template.

    `filled` always holds exactly slot indices 0..current_index-1 in order.
    """
    template: Template
    filled: Tuple[FilledSlot, ...] = ()
    current_index: int = 0

    @property
    def total(self) -> int:
        return len(self.template.slots)

    @property
    def is_complete(self) -> bool:
        return self.current_index == self.total

    @property
    def current_slot(self) -> Optional[Slot]:
        if self.is_complete:
            return None
        return self.template.slots[self.current_index]

    def used_answers(self) -> List[str]:
        return [f.answer for f in self.filled]


@dataclass
class RenderedState:
    """Read-only view of a FillState for display."""
    grid: List[List[str]]
    constraints: Dict[int, str] = field(default_factory=dict)
    pattern: str = ""
    current_slot: Optional[Slot] = None
    progress: Dict[str, object] = field(default_factory=dict)

    def to_string(self) -> str:
        """Convert grid to string representation."""
        lines = []
        for row in self.grid:
            line = ""
            for cell in row:
                if cell == "#":
                    line += "■ "
                elif cell:
                    line += f"{cell} "
                else:
                    line += "_ "
            lines.append(line.rstrip())
        return "\n".join(lines)

