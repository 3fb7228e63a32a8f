#!/usr/bin/env python3
# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Interactive crossword template filler.

The caller keeps the fill state in a JSON file and passes it back on
every command; nothing is stored anywhere else.

Usage:
    python main.py templates
    python main.py show mini --state mini.json
    python main.py step mini --state mini.json --hint "ocean words"
    python main.py step mini --state mini.json --answer WATER --clue "H2O"
    python main.py backtrack mini --state mini.json --to 2
    python main.py export mini --state mini.json --output mini_puzzle.json
    python main.py fit --words words.json --count 10
    python main.py fit --generate --theme "Space" --count 10
"""

import argparse
import json
import logging
import os
import random
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add src to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ai_limiter import AICallbackLimiter
from ai_word_generator import AIWordGenerator
from config import (
    FillerConfig, ConfigValidationError, VALID_DIFFICULTIES,
    discover_api_key, get_model, load_config,
)
from errors import FillError
from fit_search import fit_subset, MIN_SUBSET
from interactive_filler import InteractiveFiller, StepResult
from layout_placer import NodeLayoutPlacer
from logging_config import setup_logging
from prompt_loader import PromptLoader, PromptSchemaError
from template_parser import TemplateSource

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", "-c", metavar="PATH", help="YAML configuration file")
    common.add_argument("--templates", metavar="PATH",
                        help="Template file (default: CROSSWORD_TEMPLATES env var)")
    common.add_argument("--theme", "-t", metavar="TEXT", help="Puzzle theme")
    common.add_argument("--difficulty", "-d", choices=VALID_DIFFICULTIES, help="Difficulty level")
    common.add_argument("--max-ai-callbacks", type=int, metavar="INT",
                        help="Maximum AI API calls allowed (default: 50)")
    common.add_argument("--prompt-config", metavar="PATH", help="Path to prompts.yaml file")
    common.add_argument("--api-key", metavar="KEY", help="Anthropic API key")
    common.add_argument("--model", metavar="MODEL", help="AI model to use")
    common.add_argument("--log-dir", metavar="PATH", help="Write a debug log file here")
    common.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    parser = argparse.ArgumentParser(
        description="Fill crossword templates one slot at a time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Usage:", 1)[1],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("templates", parents=[common], help="List template keys")

    for name, help_text in (
        ("show", "Render the current fill state"),
        ("step", "Fill the current slot and advance"),
        ("backtrack", "Return to an earlier slot"),
        ("export", "Export a completed puzzle"),
    ):
        cmd = sub.add_parser(name, parents=[common], help=help_text)
        cmd.add_argument("template", help="Template key")
        cmd.add_argument("--state", "-s", metavar="PATH", required=True,
                         help="JSON state file (created if missing)")
        if name == "step":
            cmd.add_argument("--hint", metavar="TEXT", help="Preferred clue direction")
            cmd.add_argument("--answer", metavar="WORD", help="Use this answer instead of the AI")
            cmd.add_argument("--clue", metavar="TEXT", help="Clue for --answer")
        if name == "backtrack":
            cmd.add_argument("--to", type=int, required=True, dest="target", metavar="INDEX",
                             help="0-based slot index to resume from")
        if name == "export":
            cmd.add_argument("--output", "-o", metavar="PATH", help="Write JSON here instead of stdout")

    fit = sub.add_parser("fit", parents=[common], help="Trim a word list to what fits a layout")
    source = fit.add_mutually_exclusive_group(required=True)
    source.add_argument("--words", metavar="PATH", help="JSON list of {answer, clue}")
    source.add_argument("--generate", action="store_true", help="Generate a themed list with the AI")
    fit.add_argument("--count", type=int, required=True, metavar="INT", help="Desired word count")
    fit.add_argument("--fit-attempts", type=int, metavar="INT", help="Randomized trials (default: 6)")
    fit.add_argument("--seed", type=int, metavar="INT", help="Seed for repeatable search")
    fit.add_argument("--output", "-o", metavar="PATH", help="Write JSON here instead of stdout")

    return parser


def build_template_source(config: FillerConfig) -> TemplateSource:
    if config.templates.path:
        return TemplateSource.from_file(config.templates.path)
    return TemplateSource.from_env(config.templates.env_var)


def build_generator(config: FillerConfig) -> AIWordGenerator:
    """Create the AI word generator from configuration."""
    prompt_loader = None
    if Path(config.ai.prompt_config).exists():
        try:
            prompt_loader = PromptLoader(config.ai.prompt_config)
        except PromptSchemaError as e:
            logger.warning(f"Ignoring prompt config: {e}")

    generator = AIWordGenerator(
        api_key=discover_api_key(config),
        model=get_model(config),
        limiter=AICallbackLimiter.from_config({
            'max_ai_callbacks': config.generation.max_ai_callbacks,
            'limits': config.generation.limits,
        }),
        prompt_loader=prompt_loader,
        timeout=config.ai.timeout,
        temperature=config.ai.temperature,
        max_tokens=config.ai.max_tokens,
    )
    if not generator.is_available():
        logger.warning("No Anthropic API key found; AI generation is unavailable")
    return generator


def log_generator_stats(generator: AIWordGenerator) -> None:
    stats = generator.get_stats()
    logger.info("AI usage:")
    logger.info(f"   API calls: {stats['api_calls']}")
    logger.info(f"   Words proposed: {stats['words_proposed']}")
    logger.info(f"   Lists generated: {stats['lists_generated']}")
    logger.info(f"   Tokens used: {stats['tokens_used']}")
    logger.info(f"   Calls remaining: {stats['limiter']['remaining_calls']}")


def read_state(path: str) -> Dict[str, Any]:
    """Load the caller-held state file; a missing file is a fresh start."""
    state_path = Path(path)
    if not state_path.exists():
        return {'filled_slots': [], 'current_slot_index': 0}
    with open(state_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"State file {path} must contain a JSON object")
    return data


def write_json(data: Any, path: Optional[str] = None) -> None:
    text = json.dumps(data, indent=2)
    if path:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text + "\n")
    else:
        print(text)


def print_result(result: StepResult) -> None:
    """Show the grid, the next slot and progress."""
    if not result.ok:
        print(f"Error [{result.error_code}]: {result.error}")
        return
    rendered = result.rendered
    progress = rendered.progress
    if result.filled_slot:
        print(f"Accepted {result.filled_slot.answer}: {result.filled_slot.clue}")
    print(rendered.to_string())
    print()
    print(f"Progress: {progress['filled']}/{progress['total']} ({progress['percent']}%)")
    if rendered.current_slot is not None:
        slot = rendered.current_slot
        print(
            f"Next: slot {progress['current_index']} (#{slot.id} {slot.direction.value}, "
            f"{slot.length} letters) pattern {rendered.pattern}"
        )
    else:
        print("Puzzle complete")


def run_state_command(args: argparse.Namespace, config: FillerConfig) -> int:
    generator = build_generator(config) if args.command == "step" and not args.answer else None
    filler = InteractiveFiller(
        build_template_source(config),
        generator=generator,
        theme=config.theme,
        difficulty=config.difficulty,
    )
    state = read_state(args.state)
    filled = state.get('filled_slots') or []
    current = state.get('current_slot_index')

    if args.command == "show":
        result = filler.render(args.template, filled, current)
    elif args.command == "step" and args.answer:
        result = filler.submit_answer(args.template, args.answer, args.clue or "", filled, current)
    elif args.command == "step":
        result = filler.generate_step(
            args.template, filled, current,
            hint=args.hint, theme=args.theme, difficulty=args.difficulty,
        )
        log_generator_stats(generator)
    elif args.command == "backtrack":
        result = filler.backtrack(args.template, args.target, filled, current)
    else:
        result = filler.export(args.template, filled, current)
        if result.ok:
            write_json(result.puzzle, args.output)
            return EXIT_OK

    print_result(result)
    if not result.ok:
        return EXIT_FAILURE
    if args.command in ("step", "backtrack"):
        write_json(result.payload, args.state)
    return EXIT_OK


def run_fit(args: argparse.Namespace, config: FillerConfig) -> int:
    """Fit search over a word list file or an AI-generated themed list."""
    if args.generate:
        generator = build_generator(config)
        candidates = generator.generate_word_list(config.theme, config.difficulty, args.count)
        log_generator_stats(generator)
    else:
        with open(args.words, 'r', encoding='utf-8') as f:
            candidates = json.load(f)
        if not isinstance(candidates, list):
            raise ValueError(f"{args.words} must contain a JSON list")
        if not all(isinstance(w, dict) for w in candidates):
            raise ValueError(f"{args.words} entries must be mappings with 'answer' and 'clue'")

    placer = NodeLayoutPlacer(
        script_path=config.placer.script_path,
        node_binary=config.placer.node_binary,
        timeout=config.placer.timeout,
        max_grid_size=config.fill.max_grid_size,
    )
    rng = random.Random(args.seed) if args.seed is not None else None
    fitted = fit_subset(
        candidates, placer,
        desired_count=args.count,
        fit_attempts=config.fill.fit_attempts,
        rng=rng,
    )

    min_acceptable = max(args.count - config.fill.min_fit_tolerance, MIN_SUBSET)
    if len(fitted) < min_acceptable:
        logger.warning(
            f"Only {len(fitted)} words fit (requested {args.count}, minimum {min_acceptable})"
        )
    write_json(fitted, args.output)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_dir, "DEBUG" if args.verbose else "INFO")

    try:
        config = load_config(args)
    except ConfigValidationError as e:
        logger.error(str(e))
        return EXIT_CONFIG

    try:
        if args.command == "templates":
            for key in build_template_source(config).keys():
                print(key)
            return EXIT_OK
        if args.command == "fit":
            return run_fit(args, config)
        return run_state_command(args, config)
    except FillError as e:
        logger.error(f"[{e.code}] {e.message}")
        return EXIT_FAILURE
    except (OSError, ValueError) as e:
        logger.error(str(e))
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
