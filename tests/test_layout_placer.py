# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""Unit tests for layout_placer module."""

import base64
import json
import os
import subprocess
import sys
import unittest
from unittest.mock import MagicMock, patch

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from layout_placer import Layout, NodeLayoutPlacer, PlacedWord, compact_layout, parse_layout


RAW_LAYOUT = {
    'rows': 5,
    'cols': 6,
    'table': [['-'] * 6 for _ in range(5)],
    'result': [
        {'answer': 'orbit', 'clue': 'Path', 'startx': 3, 'starty': 2, 'orientation': 'across'},
        {'answer': 'COMET', 'clue': 'Icy body', 'startx': 4, 'starty': 2, 'orientation': 'down'},
        {'answer': 'NEBULA', 'clue': 'Gas cloud', 'startx': 0, 'starty': 0, 'orientation': 'none'},
    ],
}


class TestParseLayout(unittest.TestCase):
    """Tests for parse_layout and compact_layout."""

    def test_unplaced_words_dropped(self):
        """Words with orientation 'none' are not placed."""
        layout = parse_layout(RAW_LAYOUT)

        self.assertEqual([w.answer for w in layout.placed], ['ORBIT', 'COMET'])
        self.assertEqual(layout.placed_count, 2)
        self.assertEqual((layout.rows, layout.cols), (5, 6))

    def test_coordinates_compacted(self):
        """The top-left placed word is rebased to (1, 1)."""
        layout = parse_layout(RAW_LAYOUT)

        self.assertEqual([(w.startx, w.starty) for w in layout.placed], [(1, 1), (2, 1)])

    def test_compact_noop(self):
        """Already-compact layouts are returned as-is."""
        layout = Layout(rows=3, cols=3, placed=[PlacedWord('CAT', startx=1, starty=1)])
        self.assertIs(compact_layout(layout), layout)

    def test_empty_result(self):
        """A missing result list places nothing."""
        self.assertEqual(parse_layout({}).placed, [])

    def test_non_object_rejected(self):
        """Output that is not a JSON object raises ValueError."""
        for data in [None, [], "layout"]:
            with self.assertRaises(ValueError):
                parse_layout(data)

    def test_non_mapping_entries_skipped(self):
        """Result entries that are not mappings are ignored."""
        data = dict(RAW_LAYOUT, result=RAW_LAYOUT['result'] + [None, "ORBIT", 7])

        layout = parse_layout(data)

        self.assertEqual([w.answer for w in layout.placed], ['ORBIT', 'COMET'])

    def test_fits(self):
        """fits() compares both dimensions to the maximum."""
        self.assertTrue(Layout(rows=15, cols=15).fits(15))
        self.assertFalse(Layout(rows=16, cols=10).fits(15))


class TestNodeLayoutPlacer(unittest.TestCase):
    """Tests for NodeLayoutPlacer with subprocess mocked out."""

    WORDS = [
        {'answer': 'orbit', 'clue': 'Path'},
        {'answer': 'NEBULA', 'clue': 'Gas cloud'},
        {'answer': 'COMET', 'clue': 'Icy body'},
    ]

    def completed(self, data):
        return MagicMock(stdout=json.dumps(data), returncode=0)

    @patch('layout_placer.subprocess.run')
    def test_runs_node_with_encoded_words(self, mock_run):
        """Words are sent longest first, upper-cased and base64 encoded."""
        mock_run.return_value = self.completed(RAW_LAYOUT)
        placer = NodeLayoutPlacer(script_path='/opt/placer.js', node_binary='nodejs', timeout=5)

        placer(self.WORDS)

        args, kwargs = mock_run.call_args
        command = args[0]
        self.assertEqual(command[:2], ['nodejs', '/opt/placer.js'])
        sent = json.loads(base64.b64decode(command[2]).decode('utf-8'))
        self.assertEqual([w['answer'] for w in sent], ['NEBULA', 'ORBIT', 'COMET'])
        self.assertEqual(kwargs['timeout'], 5)
        self.assertTrue(kwargs['check'])

    @patch('layout_placer.subprocess.run')
    def test_keeps_order_without_smart_order(self, mock_run):
        """smart_order=False sends words in the given order."""
        mock_run.return_value = self.completed(RAW_LAYOUT)
        placer = NodeLayoutPlacer(smart_order=False)

        placer(self.WORDS)

        sent = json.loads(base64.b64decode(mock_run.call_args[0][0][2]))
        self.assertEqual([w['answer'] for w in sent], ['ORBIT', 'NEBULA', 'COMET'])

    @patch('layout_placer.subprocess.run')
    def test_returns_parsed_layout(self, mock_run):
        """Successful runs return the parsed, compacted layout."""
        mock_run.return_value = self.completed(RAW_LAYOUT)

        layout = NodeLayoutPlacer()(self.WORDS)

        self.assertEqual(layout.placed_count, 2)
        self.assertEqual(layout.placed[0].startx, 1)

    @patch('layout_placer.subprocess.run')
    def test_oversize_layout_places_nothing(self, mock_run):
        """Layouts larger than the maximum grid are rejected."""
        big = dict(RAW_LAYOUT, rows=16, cols=12)
        mock_run.return_value = self.completed(big)
        placer = NodeLayoutPlacer()

        layout = placer(self.WORDS)

        self.assertEqual(layout.placed, [])
        self.assertEqual(placer.stats['oversize'], 1)

    @patch('layout_placer.subprocess.run')
    def test_process_failure_returns_empty_layout(self, mock_run):
        """A failing node process yields an empty 10x10 layout."""
        mock_run.side_effect = subprocess.CalledProcessError(1, ['node'])
        placer = NodeLayoutPlacer()

        layout = placer(self.WORDS)

        self.assertEqual(layout.placed, [])
        self.assertEqual((layout.rows, layout.cols), (10, 10))
        self.assertEqual(placer.stats['failures'], 1)

    @patch('layout_placer.subprocess.run')
    def test_missing_node_returns_empty_layout(self, mock_run):
        """A missing node binary is treated like any other failure."""
        mock_run.side_effect = FileNotFoundError('node')

        self.assertEqual(NodeLayoutPlacer()(self.WORDS).placed, [])

    @patch('layout_placer.subprocess.run')
    def test_bad_output_returns_empty_layout(self, mock_run):
        """Unparsable output is treated as a failure."""
        mock_run.return_value = MagicMock(stdout="not json")

        self.assertEqual(NodeLayoutPlacer()(self.WORDS).placed, [])

    @patch('layout_placer.subprocess.run')
    def test_non_object_output_returns_empty_layout(self, mock_run):
        """Valid JSON that is not an object is treated as a failure."""
        placer = NodeLayoutPlacer()
        for stdout in ['null', '[1, 2]', '"text"']:
            mock_run.return_value = MagicMock(stdout=stdout)

            layout = placer(self.WORDS)

            self.assertEqual(layout.placed, [])
            self.assertEqual((layout.rows, layout.cols), (10, 10))
        self.assertEqual(placer.stats['failures'], 3)

    @patch('layout_placer.subprocess.run')
    def test_stats_count_calls(self, mock_run):
        """Every call is counted."""
        mock_run.return_value = self.completed(RAW_LAYOUT)
        placer = NodeLayoutPlacer()

        placer(self.WORDS)
        placer(self.WORDS[:2])

        self.assertEqual(placer.stats['calls'], 2)


if __name__ == '__main__':
    unittest.main()
