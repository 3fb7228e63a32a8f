# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
AI Word Generator using Claude API.

Provides the word-generator capability for template filling:
- Propose one answer and clue for a slot with fixed-letter constraints
- Generate a themed word list for fit search

Uses the Anthropic Claude API with call limiting and prompt templates.
"""

import json
import logging
import os
import re
from typing import List, Dict, Optional, Tuple

import anthropic

from ai_limiter import AICallbackLimiter
from errors import GenerationFailure
from prompt_loader import PromptRenderError
from word_acquisition import WordRequest

DEFAULT_MODEL = "claude-sonnet-4-20250514"
MIN_LIST_WORD = 3
MAX_LIST_WORD = 12

CODE_FENCE = re.compile(r'```(?:json)?\n?')


def _extract_json(text: str, opener: str, closer: str) -> str:
    cleaned = CODE_FENCE.sub('', text).strip()
    match = re.search(re.escape(opener) + r'[\s\S]*' + re.escape(closer), cleaned)
    if not match:
        raise GenerationFailure("No valid JSON found in AI response")
    return match.group()


class AIWordGenerator:
    """
    Generates crossword answers and clues using Claude API.

    Features:
    - One constrained word per slot (propose_word)
    - Themed word lists (generate_word_list)
    - Callback limiting to prevent runaway token usage
    - External prompt templates
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        limiter: Optional[AICallbackLimiter] = None,
        prompt_loader: Optional[object] = None,
        timeout: float = 30.0,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        client: Optional[object] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the AI word generator.

        Args:
            api_key: Anthropic API key (or set ANTHROPIC_API_KEY env var)
            model: Claude model to use
            limiter: Optional AICallbackLimiter for tracking limits
            prompt_loader: Optional PromptLoader for external prompts
            timeout: Per-request timeout in seconds
            temperature: Default sampling temperature
            max_tokens: Default response token cap
            client: Pre-built client (used instead of creating one)
            logger: Logger instance (uses module logger if not provided)
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model
        self.limiter = limiter or AICallbackLimiter()
        self.prompt_loader = prompt_loader
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.logger = logger if logger else logging.getLogger(__name__)

        if client is not None:
            self.client = client
        elif self.api_key:
            self.client = anthropic.Anthropic(api_key=self.api_key, timeout=timeout)
        else:
            self.client = None

        self.stats = {
            "api_calls": 0,
            "words_proposed": 0,
            "lists_generated": 0,
            "tokens_used": 0,
        }

    def is_available(self) -> bool:
        """Check if AI generation is available."""
        return self.client is not None

    def _make_request(
        self,
        prompt_type: str,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        model: Optional[str] = None
    ) -> str:
        """
        Make an API request with rate limiting.

        Returns:
            Response text

        Raises:
            GenerationFailure: If unavailable, limited or the call failed
        """
        if not self.client:
            raise GenerationFailure("AI word generation is not available (no API key)")

        if not self.limiter.can_call(prompt_type):
            self.logger.warning(f"AI limit reached for {prompt_type}")
            raise GenerationFailure(f"AI call limit reached for {prompt_type}")

        try:
            self.stats["api_calls"] += 1
            response = self.client.messages.create(
                model=model or self.model,
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature if temperature is None else temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}]
            )
            text = response.content[0].text
        except anthropic.APIError as e:
            self.logger.error(f"AI request error: {e}", exc_info=True)
            self.limiter.record_call(prompt_type, success=False)
            raise GenerationFailure(f"AI request failed: {e}")

        tokens = response.usage.input_tokens + response.usage.output_tokens
        self.stats["tokens_used"] += tokens
        self.limiter.record_call(prompt_type, tokens_used=tokens, success=True)
        return text

    def _render(self, prompt_type: str, fallback, **variables) -> Tuple[str, str, Optional[str], Optional[float], Optional[int]]:
        """Render a YAML prompt when configured, else the inline prompt."""
        if self.prompt_loader:
            try:
                template = self.prompt_loader.get(prompt_type)
                system_prompt, user_prompt = template.render(**variables)
                return system_prompt, user_prompt, template.model, template.temperature, template.max_tokens
            except (KeyError, PromptRenderError) as e:
                self.logger.warning(f"Prompt template '{prompt_type}' unusable, using inline prompt: {e}")
        system_prompt, user_prompt = fallback(**variables)
        return system_prompt, user_prompt, None, None, None

    def propose_word(self, request: WordRequest) -> Dict[str, str]:
        """
        Ask for one answer and clue matching the request.

        The reply is parsed but not validated against the slot; that is
        the caller's job.

        Returns:
            {'answer': ..., 'clue': ...}

        Raises:
            GenerationFailure: Unavailable, limited, failed or unparsable
        """
        if request.constraints:
            constraint_desc = (
                f"This word has {len(request.constraints)} fixed letter(s) from intersecting words:\n" +
                "\n".join(
                    f"  - Position {pos + 1}: must be '{letter}'"
                    for pos, letter in sorted(request.constraints.items())
                )
            )
        else:
            constraint_desc = "This word has no intersecting constraints."

        used = ", ".join(request.used_answers) if request.used_answers else "none"
        system_prompt, user_prompt, model, temperature, max_tokens = self._render(
            'slot_word_generation',
            self._build_slot_prompts,
            length=request.length,
            orientation=request.direction.value,
            pattern=request.pattern,
            constraints=constraint_desc,
            theme=request.theme,
            difficulty=request.difficulty,
            hint=f"Preferred clue direction: {request.hint}" if request.hint else "",
            used_answers=used,
        )

        text = self._make_request(
            'slot_word_generation',
            system_prompt,
            user_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            model=model,
        )
        proposal = self.parse_word_response(text)
        self.stats["words_proposed"] += 1
        return proposal

    def _build_slot_prompts(
        self,
        length: int,
        orientation: str,
        pattern: str,
        constraints: str,
        theme: str,
        difficulty: str,
        hint: str,
        used_answers: str
    ) -> Tuple[str, str]:
        """Build single-slot prompts."""
        system_prompt = f"""You are a crossword puzzle constructor. Propose one answer and clue
for a grid slot. The answer must fit the slot exactly."""

        user_prompt = f"""Generate a crossword puzzle word with specific constraints.

Theme: {theme}
Difficulty: {difficulty}

Required word:
- Length: exactly {length} letters
- Orientation: {orientation}
- Pattern: {pattern} (where '.' is any letter)
{constraints}

Already used words (DO NOT repeat): {used_answers}
{hint}

Rules:
- Answer must be UPPERCASE A-Z only, no spaces or special characters
- If constraints specify fixed letters, the word MUST match them exactly
- Clue should be concise (5-50 characters) and suit {difficulty} difficulty

Return ONLY this JSON (no extra text):
{{"clue": "Clue text here", "answer": "ANSWER"}}"""

        return system_prompt, user_prompt

    def parse_word_response(self, text: str) -> Dict[str, str]:
        """Extract {'answer', 'clue'} from a single-word reply."""
        try:
            parsed = json.loads(_extract_json(text, '{', '}'))
        except json.JSONDecodeError as e:
            raise GenerationFailure(f"Failed to parse AI response: {e}")

        if not isinstance(parsed, dict):
            raise GenerationFailure("Invalid response structure: expected an object")
        answer = parsed.get('answer')
        clue = parsed.get('clue')
        if not isinstance(answer, str) or not isinstance(clue, str) or not answer.strip() or not clue.strip():
            raise GenerationFailure("Invalid response structure: missing answer or clue")
        return {'answer': answer.strip().upper(), 'clue': clue.strip()}

    def generate_word_list(
        self,
        theme: str,
        difficulty: str = "Medium",
        word_count: int = 10
    ) -> List[Dict[str, str]]:
        """
        Generate themed candidate words with clues.

        Asks for word_count..word_count+2 words and keeps those whose
        answers are 3-12 letters A-Z.

        Raises:
            GenerationFailure: If the request fails or too few words are valid
        """
        system_prompt, user_prompt, model, temperature, max_tokens = self._render(
            'themed_word_list',
            self._build_list_prompts,
            theme=theme,
            difficulty=difficulty,
            word_count=word_count,
            word_count_plus_two=word_count + 2,
        )

        text = self._make_request(
            'themed_word_list',
            system_prompt,
            user_prompt,
            max_tokens=max_tokens or 2048,
            temperature=0.6 if temperature is None else temperature,
            model=model,
        )
        words = self._parse_word_list_response(text)

        if len(words) < word_count:
            raise GenerationFailure(
                f"After filtering invalid words, only {len(words)} valid words remain "
                f"(need at least {word_count})"
            )
        self.stats["lists_generated"] += 1
        return words

    def _build_list_prompts(
        self,
        theme: str,
        difficulty: str,
        word_count: int,
        word_count_plus_two: int
    ) -> Tuple[str, str]:
        """Build themed word list prompts."""
        system_prompt = """You are an expert crossword puzzle constructor. Generate words that are
factually accurate, common enough for solvers and clearly tied to the theme."""

        user_prompt = f"""Generate a crossword word list.

- Theme: {theme}
- Difficulty: {difficulty}
- Target words: at least {word_count}, up to {word_count_plus_two}

Rules:
- Each answer is {MIN_LIST_WORD}-{MAX_LIST_WORD} letters, UPPERCASE A-Z only.
- Each clue is concise (5-50 chars) and clearly related to the theme.

Return ONLY this JSON (no extra text):
{{"title": "Puzzle Title", "words": [{{"clue": "Clue text", "answer": "ANSWER"}}]}}"""

        return system_prompt, user_prompt

    def _parse_word_list_response(self, text: str) -> List[Dict[str, str]]:
        """Parse a themed list reply, dropping invalid entries."""
        try:
            parsed = json.loads(_extract_json(text, '{', '}'))
        except json.JSONDecodeError as e:
            raise GenerationFailure(f"Failed to parse AI response: {e}")

        items = parsed.get('words') if isinstance(parsed, dict) else None
        if not isinstance(items, list):
            raise GenerationFailure("Invalid puzzle structure: missing words array")

        words = []
        for index, item in enumerate(items):
            answer = item.get('answer') if isinstance(item, dict) else None
            clue = item.get('clue') if isinstance(item, dict) else None
            if not isinstance(answer, str) or not isinstance(clue, str) or not clue.strip():
                self.logger.warning(f"Filtered word at index {index}: missing clue or answer")
                continue
            answer = answer.strip().upper()
            if not re.fullmatch(r'[A-Z]+', answer) or not MIN_LIST_WORD <= len(answer) <= MAX_LIST_WORD:
                self.logger.warning(f"Filtered invalid word at index {index}: {answer} ({len(answer)} letters)")
                continue
            words.append({'answer': answer, 'clue': clue.strip()})
        return words

    def get_stats(self) -> Dict:
        """Get usage statistics."""
        stats = self.stats.copy()
        stats['limiter'] = self.limiter.get_stats()
        return stats
