# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Template parsing and template sources.

Normalizes every accepted template description into a Template:
- grid as a 2D array, a flat array of rows*cols, or newline-delimited text
- or an explicit word_slots list using 1-based coordinates

Template sources are a mapping keyed by template key, or a list of
mappings matched on 'key' then 'name'. They are read from the
CROSSWORD_TEMPLATES environment variable (JSON) or from a YAML/JSON file.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from errors import InvalidTemplateData, TemplateNotFound
from models import Direction, Grid, Slot, Template, MIN_SLOT_LENGTH
from slot_detector import detect_slots

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 15
BLOCKED_TOKENS = {'#', 'black', 'blocked', 'x', '1', 'true'}
ORIENTATION_SYNONYMS = {
    'across': Direction.ACROSS,
    'horizontal': Direction.ACROSS,
    'h': Direction.ACROSS,
    'a': Direction.ACROSS,
    'down': Direction.DOWN,
    'vertical': Direction.DOWN,
    'v': Direction.DOWN,
    'd': Direction.DOWN,
}


def normalize_cell(cell: Any) -> bool:
    """True when the cell token marks a blocked square."""
    return str(cell).strip().lower() in BLOCKED_TOKENS


def normalize_orientation(orientation: Any) -> Direction:
    """Map orientation synonyms to a Direction; unknown values are ACROSS."""
    return ORIENTATION_SYNONYMS.get(str(orientation).strip().lower(), Direction.ACROSS)


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise InvalidTemplateData(f"'{field_name}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidTemplateData(f"'{field_name}' must be an integer, got {value!r}")


def _normalize_keys(data: Any) -> Any:
    if isinstance(data, dict):
        return {str(k): _normalize_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_normalize_keys(item) for item in data]
    return data


def parse_grid(grid_data: Any, rows: int, cols: int) -> Grid:
    """
    Parse a grid description into a Grid of the given dimensions.

    Args:
        grid_data: 2D array, flat array or text block (None means all open)
        rows: Number of rows
        cols: Number of columns

    Returns:
        Grid instance

    Raises:
        InvalidTemplateData: If the description does not match rows x cols
    """
    if grid_data is None or grid_data == "" or grid_data == []:
        return Grid(rows=rows, cols=cols)

    if isinstance(grid_data, list) and all(isinstance(r, list) for r in grid_data):
        if len(grid_data) != rows or any(len(r) != cols for r in grid_data):
            raise InvalidTemplateData(
                f"Grid rows do not match declared size {rows}x{cols}"
            )
        return Grid.from_rows([[normalize_cell(c) for c in r] for r in grid_data])

    if isinstance(grid_data, list):
        if len(grid_data) != rows * cols:
            raise InvalidTemplateData(
                f"Flat grid has {len(grid_data)} cells, expected {rows * cols}"
            )
        return Grid.from_rows([
            [normalize_cell(grid_data[r * cols + c]) for c in range(cols)]
            for r in range(rows)
        ])

    if isinstance(grid_data, str):
        lines = [line for line in grid_data.split("\n") if line.strip()]
        # Missing lines or characters are open cells
        return Grid.from_rows([
            [
                normalize_cell(lines[r][c]) if r < len(lines) and c < len(lines[r]) else False
                for c in range(cols)
            ]
            for r in range(rows)
        ])

    raise InvalidTemplateData(f"Unsupported grid format: {type(grid_data).__name__}")


def parse_word_slots(slots_data: Any, grid: Grid) -> List[Slot]:
    """
    Normalize an explicit slot list. Order is kept as given.

    Args:
        slots_data: List of {id, startx, starty, orientation, length}
        grid: Grid the slots must fit inside

    Returns:
        List of slots with 0-based coordinates
    """
    if not isinstance(slots_data, list):
        raise InvalidTemplateData("'word_slots' must be a list")

    slots = []
    for index, entry in enumerate(slots_data):
        if not isinstance(entry, dict):
            raise InvalidTemplateData(f"Slot at index {index} must be a mapping")
        slot = Slot(
            id=_to_int(entry.get('id') or index + 1, 'id'),
            start_row=_to_int(entry.get('starty'), 'starty') - 1,
            start_col=_to_int(entry.get('startx'), 'startx') - 1,
            direction=normalize_orientation(entry.get('orientation')),
            length=_to_int(entry.get('length'), 'length'),
        )
        if slot.length < MIN_SLOT_LENGTH:
            raise InvalidTemplateData(
                f"Slot {slot.id} is {slot.length} long (minimum {MIN_SLOT_LENGTH})"
            )
        last_row, last_col = slot.cell(slot.length - 1)
        if not (grid.is_valid_position(slot.start_row, slot.start_col) and
                grid.is_valid_position(last_row, last_col)):
            raise InvalidTemplateData(
                f"Slot {slot.id} does not fit inside the {grid.rows}x{grid.cols} grid"
            )
        slots.append(slot)
    return slots


def parse_template(data: Any, key: Optional[str] = None) -> Template:
    """
    Build a Template from a raw template description.

    Args:
        data: Template mapping from a template source
        key: Template key it was stored under

    Returns:
        Template instance

    Raises:
        InvalidTemplateData: If the description is malformed
    """
    if not isinstance(data, dict):
        raise InvalidTemplateData(
            f"Template must be a mapping, got {type(data).__name__}"
        )
    data = _normalize_keys(data)
    grid_data = data.get('grid')

    default_rows = DEFAULT_DIMENSION
    default_cols = DEFAULT_DIMENSION
    if isinstance(grid_data, list) and grid_data and all(isinstance(r, list) for r in grid_data):
        default_rows = len(grid_data)
        default_cols = len(grid_data[0])

    rows = _to_int(data.get('rows', default_rows), 'rows')
    cols = _to_int(data.get('cols', default_cols), 'cols')
    if rows <= 0 or cols <= 0:
        raise InvalidTemplateData(f"Grid size must be positive, got {rows}x{cols}")

    grid = parse_grid(grid_data, rows, cols)

    if data.get('word_slots'):
        slots = parse_word_slots(data['word_slots'], grid)
    else:
        slots = detect_slots(grid)

    template = Template(
        name=str(data.get('name') or key or "Untitled"),
        grid=grid,
        slots=tuple(slots),
        key=key,
        theme=data.get('theme'),
        difficulty=data.get('difficulty') or "Medium",
    )
    logger.debug(f"Parsed template '{template.name}': {rows}x{cols}, {len(slots)} slots")
    return template


class TemplateSource:
    """
    Looks up raw template descriptions by key.

    Usage:
        source = TemplateSource.from_env()
        template = source.get('mini-5x5')
    """

    def __init__(self, data: Any):
        if not isinstance(data, (dict, list)):
            raise InvalidTemplateData(
                f"Template source must be a mapping or list, got {type(data).__name__}"
            )
        self.data = data

    @classmethod
    def from_string(cls, text: str) -> 'TemplateSource':
        """Parse JSON or YAML text (JSON is valid YAML)."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise InvalidTemplateData(f"Invalid template source: {e}")
        return cls(data)

    @classmethod
    def from_env(cls, env_var: str = "CROSSWORD_TEMPLATES") -> 'TemplateSource':
        text = os.environ.get(env_var)
        if not text or not text.strip():
            raise InvalidTemplateData(f"{env_var} environment variable not set")
        return cls.from_string(text)

    @classmethod
    def from_file(cls, path: str) -> 'TemplateSource':
        path = Path(path)
        if not path.exists():
            raise InvalidTemplateData(f"Template file not found: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_string(f.read())

    def keys(self) -> List[str]:
        if isinstance(self.data, dict):
            return [str(k) for k in self.data.keys()]
        keys = []
        for entry in self.data:
            if isinstance(entry, dict) and (entry.get('key') or entry.get('name')):
                keys.append(str(entry.get('key') or entry.get('name')))
        return keys

    def find(self, key: str) -> Optional[Dict[str, Any]]:
        if isinstance(self.data, dict):
            return self.data.get(key)
        for entry in self.data:
            if isinstance(entry, dict) and (entry.get('key') == key or entry.get('name') == key):
                return entry
        return None

    def get(self, key: str) -> Template:
        """
        Parse the template stored under key.

        Raises:
            TemplateNotFound: If no template has that key
            InvalidTemplateData: If the stored template is malformed
        """
        data = self.find(key)
        if data is None:
            raise TemplateNotFound(key)
        return parse_template(data, key)
