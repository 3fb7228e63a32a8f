# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Prompt loader module for the template filler.

Loads AI prompt templates from external YAML configuration, supporting
{{variable}} substitution.
"""

import re
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Optional, Any, List, Tuple

import yaml


class PromptSchemaError(Exception):
    """Raised when prompt configuration schema is invalid."""
    pass


class PromptRenderError(Exception):
    """Raised when prompt variable substitution fails."""
    pass


@dataclass
class PromptTemplate:
    """
    A single prompt template with configuration.

    Attributes:
        name: Display name for the prompt
        system: System prompt template
        user: User prompt template
        model: Optional model override for this prompt
        temperature: Temperature setting for this prompt
        max_tokens: Maximum tokens for response
    """
    name: str
    system: str
    user: str
    description: str = ""
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 1024

    # Pattern for variable substitution
    VARIABLE_PATTERN = re.compile(r'\{\{(\w+)\}\}')

    def render(self, **variables) -> Tuple[str, str]:
        """
        Render the prompt with variable substitution.

        Returns:
            Tuple of (system_prompt, user_prompt)

        Raises:
            PromptRenderError: If required variables are missing
        """
        return (
            self._substitute(self.system, variables, 'system'),
            self._substitute(self.user, variables, 'user'),
        )

    def _substitute(self, template: str, variables: Dict[str, Any], prompt_type: str) -> str:
        required_vars = set(self.VARIABLE_PATTERN.findall(template))
        missing = required_vars - set(variables.keys())
        if missing:
            raise PromptRenderError(
                f"Missing required variables for {prompt_type} prompt: {missing}"
            )

        result = template
        for var_name in required_vars:
            value = variables[var_name]
            if isinstance(value, list):
                value = '\n'.join(f'- {item}' for item in value)
            elif not isinstance(value, str):
                value = str(value)
            result = result.replace(f'{{{{{var_name}}}}}', value)
        return result


class PromptLoader:
    """
    Loads and manages prompt templates from YAML configuration.

    Usage:
        loader = PromptLoader('prompts.yaml')
        template = loader.get('slot_word_generation')
        system, user = template.render(length=5, ...)
    """

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)
        self.prompts: Dict[str, PromptTemplate] = {}
        self.version: str = "1.0"
        self._load()

    def _load(self):
        if not self.config_path.exists():
            raise PromptSchemaError(
                f"Prompt configuration file not found: {self.config_path}"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PromptSchemaError(f"Invalid YAML in prompts config: {e}")

        if not isinstance(data, dict):
            raise PromptSchemaError("Prompts configuration must be a mapping")
        if 'prompts' not in data:
            raise PromptSchemaError("Missing 'prompts' section in configuration")

        self.version = str(data.get('version', '1.0'))
        defaults = data.get('model_defaults') or {}

        for prompt_name, prompt_data in data['prompts'].items():
            for field_name in ('name', 'system', 'user'):
                if field_name not in prompt_data:
                    raise PromptSchemaError(
                        f"Missing required field '{field_name}' in prompt '{prompt_name}'"
                    )
            self.prompts[prompt_name] = PromptTemplate(
                name=prompt_data['name'],
                description=prompt_data.get('description', ''),
                system=prompt_data['system'],
                user=prompt_data['user'],
                model=prompt_data.get('model', defaults.get('model')),
                temperature=prompt_data.get('temperature', defaults.get('temperature', 0.7)),
                max_tokens=prompt_data.get('max_tokens', defaults.get('max_tokens', 1024)),
            )

    def get(self, prompt_name: str) -> PromptTemplate:
        """
        Get a prompt template by name.

        Raises:
            KeyError: If prompt not found
        """
        if prompt_name not in self.prompts:
            raise KeyError(
                f"Unknown prompt '{prompt_name}'. "
                f"Available prompts: {list(self.prompts.keys())}"
            )
        return self.prompts[prompt_name]

    def list_prompts(self) -> List[str]:
        return list(self.prompts.keys())
