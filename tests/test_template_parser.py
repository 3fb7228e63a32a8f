# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""Unit tests for template_parser module."""

import json
import os
import sys
import tempfile
import unittest
from unittest.mock import patch

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from errors import InvalidTemplateData, TemplateNotFound
from models import Direction
from template_parser import (
    TemplateSource, normalize_cell, normalize_orientation, parse_grid, parse_template,
)


class TestNormalization(unittest.TestCase):
    """Tests for cell and orientation normalization."""

    def test_blocked_tokens(self):
        """All blocked markers are recognized, case-insensitively."""
        for token in ['#', 'black', 'BLOCKED', 'x', 'X', 1, '1', True, 'true']:
            self.assertTrue(normalize_cell(token), token)

    def test_open_tokens(self):
        """Anything else is open."""
        for token in ['.', '', ' ', 0, '0', False, None, 'A']:
            self.assertFalse(normalize_cell(token), token)

    def test_orientation_synonyms(self):
        """Synonyms map onto the two directions."""
        for value in ['across', 'Horizontal', 'h', 'A']:
            self.assertEqual(normalize_orientation(value), Direction.ACROSS)
        for value in ['down', 'VERTICAL', 'v', 'd']:
            self.assertEqual(normalize_orientation(value), Direction.DOWN)

    def test_unknown_orientation_defaults_across(self):
        """Unrecognized orientations are treated as across."""
        self.assertEqual(normalize_orientation('diagonal'), Direction.ACROSS)
        self.assertEqual(normalize_orientation(None), Direction.ACROSS)


class TestParseGrid(unittest.TestCase):
    """Tests for parse_grid."""

    def test_none_is_all_open(self):
        """A missing grid is all open."""
        grid = parse_grid(None, 3, 4)
        self.assertEqual((grid.rows, grid.cols), (3, 4))
        self.assertEqual(grid.count_blocks(), 0)

    def test_2d_array(self):
        """2D arrays map cell by cell."""
        grid = parse_grid([[1, 0, 0], [0, 0, 0], [0, 0, 'x']], 3, 3)
        self.assertTrue(grid.is_blocked(0, 0))
        self.assertTrue(grid.is_blocked(2, 2))
        self.assertEqual(grid.count_blocks(), 2)

    def test_2d_array_wrong_shape(self):
        """A 2D array must match the declared dimensions."""
        with self.assertRaises(InvalidTemplateData):
            parse_grid([[0, 0], [0, 0]], 3, 3)

    def test_flat_array(self):
        """Flat arrays are read row by row."""
        grid = parse_grid([0, 1, 0, 0, 0, 1], 2, 3)
        self.assertTrue(grid.is_blocked(0, 1))
        self.assertTrue(grid.is_blocked(1, 2))
        self.assertFalse(grid.is_blocked(1, 0))

    def test_flat_array_wrong_size(self):
        """Flat arrays must have rows*cols cells."""
        with self.assertRaises(InvalidTemplateData):
            parse_grid([0, 0, 0], 2, 2)

    def test_text_grid(self):
        """Text grids use one line per row."""
        grid = parse_grid("..#\n#..\n...", 3, 3)
        self.assertTrue(grid.is_blocked(0, 2))
        self.assertTrue(grid.is_blocked(1, 0))
        self.assertEqual(grid.count_blocks(), 2)

    def test_text_grid_short_lines_are_open(self):
        """Missing lines or characters count as open cells."""
        grid = parse_grid("#", 2, 3)
        self.assertTrue(grid.is_blocked(0, 0))
        self.assertEqual(grid.count_blocks(), 1)
        self.assertEqual((grid.rows, grid.cols), (2, 3))

    def test_unsupported_type(self):
        """Other grid types are rejected."""
        with self.assertRaises(InvalidTemplateData):
            parse_grid(42, 3, 3)


class TestParseTemplate(unittest.TestCase):
    """Tests for parse_template."""

    def test_detects_slots_from_grid(self):
        """Without word_slots, slots come from the grid."""
        template = parse_template({'rows': 5, 'cols': 5, 'grid': "....."}, 'mini')

        self.assertEqual(len(template.slots), 10)
        self.assertEqual(template.key, 'mini')
        self.assertEqual(template.name, 'mini')

    def test_dimensions_from_2d_grid(self):
        """rows/cols default to the 2D array shape."""
        template = parse_template({'grid': [[0, 0, 0, 0]] * 3})
        self.assertEqual((template.rows, template.cols), (3, 4))

    def test_default_dimension(self):
        """Without size or 2D grid the template is 15x15."""
        template = parse_template({'name': 'Big'})
        self.assertEqual((template.rows, template.cols), (15, 15))
        self.assertEqual(template.name, 'Big')

    def test_explicit_slots_are_one_based(self):
        """startx/starty are converted to 0-based columns/rows."""
        template = parse_template({
            'rows': 5, 'cols': 5,
            'word_slots': [
                {'id': 7, 'startx': 3, 'starty': 1, 'orientation': 'vertical', 'length': 3},
                {'startx': 1, 'starty': 2, 'orientation': 'horizontal', 'length': 5},
            ],
        })

        first, second = template.slots
        self.assertEqual((first.id, first.start_row, first.start_col), (7, 0, 2))
        self.assertEqual(first.direction, Direction.DOWN)
        self.assertEqual((second.id, second.start_row, second.start_col), (2, 1, 0))
        self.assertEqual(second.direction, Direction.ACROSS)

    def test_explicit_slot_too_short(self):
        """Explicit slots shorter than 3 are rejected."""
        with self.assertRaises(InvalidTemplateData):
            parse_template({
                'rows': 5, 'cols': 5,
                'word_slots': [{'startx': 1, 'starty': 1, 'orientation': 'across', 'length': 2}],
            })

    def test_explicit_slot_off_grid(self):
        """Explicit slots must fit inside the grid."""
        with self.assertRaises(InvalidTemplateData):
            parse_template({
                'rows': 5, 'cols': 5,
                'word_slots': [{'startx': 4, 'starty': 1, 'orientation': 'across', 'length': 5}],
            })

    def test_bad_integer(self):
        """Non-numeric sizes are invalid template data."""
        with self.assertRaises(InvalidTemplateData):
            parse_template({'rows': 'five', 'cols': 5})

    def test_not_a_mapping(self):
        """A template must be a mapping."""
        with self.assertRaises(InvalidTemplateData):
            parse_template(["not", "a", "template"])

    def test_theme_and_difficulty(self):
        """Theme and difficulty are carried onto the template."""
        template = parse_template({'rows': 3, 'cols': 3, 'theme': 'Ocean', 'difficulty': 'Hard'})
        self.assertEqual(template.theme, 'Ocean')
        self.assertEqual(template.difficulty, 'Hard')


class TestTemplateSource(unittest.TestCase):
    """Tests for TemplateSource lookups and loaders."""

    MINI = {'name': 'Mini', 'rows': 3, 'cols': 3}

    def test_mapping_lookup(self):
        """Mappings are keyed by template key."""
        source = TemplateSource({'mini': self.MINI})

        self.assertEqual(source.keys(), ['mini'])
        self.assertEqual(source.get('mini').name, 'Mini')

    def test_list_lookup_by_key_then_name(self):
        """Lists match on 'key' first, then 'name'."""
        source = TemplateSource([
            {'key': 'first', 'rows': 3, 'cols': 3},
            {'name': 'Second', 'rows': 4, 'cols': 4},
        ])

        self.assertEqual(source.get('first').rows, 3)
        self.assertEqual(source.get('Second').rows, 4)
        self.assertEqual(source.keys(), ['first', 'Second'])

    def test_missing_key(self):
        """Unknown keys raise TemplateNotFound."""
        source = TemplateSource({'mini': self.MINI})
        with self.assertRaises(TemplateNotFound) as ctx:
            source.get('huge')
        self.assertEqual(ctx.exception.code, 'template_not_found')

    def test_from_env(self):
        """Templates can come from a JSON environment variable."""
        with patch.dict(os.environ, {'CROSSWORD_TEMPLATES': json.dumps({'mini': self.MINI})}):
            source = TemplateSource.from_env()
        self.assertEqual(source.get('mini').cols, 3)

    def test_from_env_missing(self):
        """An unset environment variable is invalid template data."""
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(InvalidTemplateData):
                TemplateSource.from_env()

    def test_from_string_invalid(self):
        """Unparsable text is invalid template data."""
        with self.assertRaises(InvalidTemplateData):
            TemplateSource.from_string("{unclosed: [")

    def test_from_string_scalar(self):
        """A scalar document is not a template source."""
        with self.assertRaises(InvalidTemplateData):
            TemplateSource.from_string("just text")

    def test_from_file(self):
        """YAML files are accepted."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("mini:\n  rows: 3\n  cols: 3\n  grid: |\n    ...\n    .#.\n    ...\n")
            path = f.name
        try:
            template = TemplateSource.from_file(path).get('mini')
        finally:
            os.unlink(path)

        self.assertEqual(template.grid.count_blocks(), 1)
        self.assertEqual(len(template.slots), 4)

    def test_from_missing_file(self):
        """A missing template file is invalid template data."""
        with self.assertRaises(InvalidTemplateData):
            TemplateSource.from_file('/nonexistent/templates.yaml')

    def test_example_file(self):
        """The shipped example templates all parse."""
        path = os.path.join(os.path.dirname(__file__), '..', 'templates.example.yaml')
        source = TemplateSource.from_file(path)

        for key in source.keys():
            self.assertTrue(source.get(key).slots, key)


if __name__ == '__main__':
    unittest.main()
