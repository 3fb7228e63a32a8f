# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""Unit tests for interactive_filler module."""

import os
import sys
import unittest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from errors import GenerationFailure
from interactive_filler import InteractiveFiller
from template_parser import TemplateSource


TEMPLATES = {
    'starter': {
        'name': 'Starter',
        'rows': 5,
        'cols': 5,
        'theme': 'Kitchen',
        'word_slots': [
            {'id': 1, 'startx': 1, 'starty': 1, 'orientation': 'across', 'length': 5},
            {'id': 2, 'startx': 3, 'starty': 1, 'orientation': 'down', 'length': 3},
            {'id': 3, 'startx': 1, 'starty': 3, 'orientation': 'across', 'length': 5},
        ],
    },
}

FILLED_ONE = [{'slot_index': 0, 'answer': 'WATER', 'clue': 'H2O'}]
FILLED_ALL = FILLED_ONE + [
    {'slot_index': 1, 'answer': 'TEA', 'clue': 'Afternoon drink'},
    {'slot_index': 2, 'answer': 'PLANT', 'clue': 'Grow it'},
]


class ScriptedGenerator:
    """Answers with queued proposals and records requests."""

    def __init__(self, *proposals):
        self.proposals = list(proposals)
        self.requests = []

    def propose_word(self, request):
        self.requests.append(request)
        proposal = self.proposals.pop(0)
        if isinstance(proposal, Exception):
            raise proposal
        return proposal


class TestInteractiveFiller(unittest.TestCase):
    """Tests for InteractiveFiller request handling."""

    def filler(self, *proposals):
        generator = ScriptedGenerator(*proposals)
        return InteractiveFiller(TemplateSource(TEMPLATES), generator), generator

    def test_render_fresh_state(self):
        """Rendering with no payload shows the first slot."""
        filler, _ = self.filler()

        result = filler.render('starter')

        self.assertTrue(result.ok)
        self.assertEqual(result.payload['current_slot_index'], 0)
        self.assertEqual(result.rendered.pattern, ".....")

    def test_generate_step_advances(self):
        """A valid generated answer advances the caller's state."""
        filler, generator = self.filler({'answer': 'TEA', 'clue': 'Afternoon drink'})

        result = filler.generate_step('starter', FILLED_ONE, 1)

        self.assertTrue(result.ok)
        self.assertEqual(result.filled_slot.answer, 'TEA')
        self.assertEqual(result.payload['current_slot_index'], 2)
        self.assertEqual(len(result.payload['filled_slots']), 2)
        self.assertEqual(result.rendered.constraints, {2: 'A'})
        self.assertEqual(generator.requests[0].constraints, {0: 'T'})

    def test_theme_resolution(self):
        """Request theme wins, then the template's, then the default."""
        filler, generator = self.filler(
            {'answer': 'WATER', 'clue': 'H2O'},
            {'answer': 'WATER', 'clue': 'H2O'},
        )

        filler.generate_step('starter', [], 0)
        filler.generate_step('starter', [], 0, theme='Ocean')

        self.assertEqual([r.theme for r in generator.requests], ['Kitchen', 'Ocean'])

    def test_invalid_answer_keeps_payload(self):
        """A rejected proposal returns the caller's payload unchanged."""
        filler, _ = self.filler({'answer': 'SEA', 'clue': 'Ocean'})

        result = filler.generate_step('starter', FILLED_ONE, 1)

        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, 'invalid_proposed_answer')
        self.assertEqual(result.payload, {
            'template_key': 'starter',
            'filled_slots': FILLED_ONE,
            'current_slot_index': 1,
        })

    def test_generation_failure_keeps_payload(self):
        """Generator failures are reported, not raised."""
        filler, _ = self.filler(GenerationFailure("AI call limit reached"))

        result = filler.generate_step('starter', FILLED_ONE, 1)

        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, 'generation_failure')
        self.assertEqual(result.payload['filled_slots'], FILLED_ONE)

    def test_unknown_template(self):
        """Unknown template keys come back as template_not_found."""
        filler, _ = self.filler()

        result = filler.render('missing')

        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, 'template_not_found')

    def test_inconsistent_payload(self):
        """A payload with gaps is rejected as an invalid fill state."""
        filler, _ = self.filler()

        result = filler.render('starter', [{'slot_index': 1, 'answer': 'TEA', 'clue': 'x'}])

        self.assertEqual(result.error_code, 'invalid_fill_state')

    def test_submit_answer(self):
        """Typed answers advance like generated ones."""
        filler, generator = self.filler()

        result = filler.submit_answer('starter', 'tea', 'Afternoon drink', FILLED_ONE, 1)

        self.assertTrue(result.ok)
        self.assertEqual(result.payload['filled_slots'][1]['answer'], 'TEA')
        self.assertEqual(generator.requests, [])

    def test_complete_state_is_unchanged(self):
        """Stepping a complete puzzle is a successful no-op."""
        filler, generator = self.filler()

        result = filler.generate_step('starter', FILLED_ALL, 3)

        self.assertTrue(result.ok)
        self.assertTrue(result.rendered.progress['complete'])
        self.assertEqual(result.payload['current_slot_index'], 3)
        self.assertEqual(generator.requests, [])

    def test_backtrack(self):
        """Backtracking truncates the caller's state."""
        filler, _ = self.filler()

        result = filler.backtrack('starter', 1, FILLED_ALL, 3)

        self.assertTrue(result.ok)
        self.assertEqual(result.payload['current_slot_index'], 1)
        self.assertEqual(result.payload['filled_slots'], FILLED_ONE)

    def test_backtrack_out_of_range(self):
        """Forward backtracks are reported as errors."""
        filler, _ = self.filler()

        result = filler.backtrack('starter', 3, FILLED_ONE, 1)

        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, 'backtrack_out_of_range')
        self.assertEqual(result.payload['current_slot_index'], 1)

    def test_backtrack_string_target(self):
        """Request parameters arrive as strings and are converted."""
        filler, _ = self.filler()

        result = filler.backtrack('starter', "1", FILLED_ALL, "3")

        self.assertTrue(result.ok)
        self.assertEqual(result.payload['current_slot_index'], 1)
        self.assertEqual(result.payload['filled_slots'], FILLED_ONE)

    def test_backtrack_non_numeric_target(self):
        """A non-numeric target is reported, not raised."""
        filler, _ = self.filler()

        result = filler.backtrack('starter', "x", FILLED_ALL, 3)

        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, 'backtrack_out_of_range')
        self.assertEqual(result.payload['filled_slots'], FILLED_ALL)

    def test_export(self):
        """Complete puzzles export their clue lists."""
        filler, _ = self.filler()

        result = filler.export('starter', FILLED_ALL)

        self.assertTrue(result.ok)
        self.assertEqual([e['answer'] for e in result.puzzle['across']], ['WATER', 'PLANT'])
        self.assertEqual(result.puzzle['down'][0]['number'], 2)

    def test_export_incomplete(self):
        """Incomplete puzzles cannot be exported."""
        filler, _ = self.filler()

        result = filler.export('starter', FILLED_ONE)

        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, 'invalid_fill_state')
        self.assertIsNone(result.puzzle)


if __name__ == '__main__':
    unittest.main()
