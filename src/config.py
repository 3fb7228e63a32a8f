# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Configuration module for the template filler.

Handles loading configuration from YAML files, command-line arguments
and environment overrides, with proper merging and validation.
"""

import os
import json
import argparse
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

import yaml

from ai_word_generator import DEFAULT_MODEL


VALID_DIFFICULTIES = ["Easy", "Medium", "Hard"]
MIN_WORD_COUNT = 3


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class FillConfig:
    """Configuration for fit search."""
    fit_attempts: int = 6
    min_fit_tolerance: int = 0
    max_grid_size: int = 15


@dataclass
class TemplateSourceConfig:
    """Where templates are read from. A file path wins over the env var."""
    path: Optional[str] = None
    env_var: str = "CROSSWORD_TEMPLATES"


@dataclass
class GenerationConfig:
    """AI call budget for one run."""
    max_ai_callbacks: int = 50
    limits: Dict[str, int] = field(default_factory=lambda: {
        "slot_word_generation": 40,
        "themed_word_list": 3,
    })


@dataclass
class AIConfig:
    """Configuration for AI integration."""
    model: Optional[str] = None
    prompt_config: str = "./prompts.yaml"
    api_key: Optional[str] = None
    api_key_env: str = "ANTHROPIC_API_KEY"
    model_env: str = "ANTHROPIC_MODEL"
    timeout: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 1024


@dataclass
class PlacerConfig:
    """Configuration for the node layout placer."""
    node_binary: str = "node"
    script_path: Optional[str] = None
    timeout: float = 30.0


@dataclass
class FillerConfig:
    """Complete configuration for the template filler."""
    theme: str = "General"
    difficulty: str = "Medium"

    fill: FillConfig = field(default_factory=FillConfig)
    templates: TemplateSourceConfig = field(default_factory=TemplateSourceConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    placer: PlacerConfig = field(default_factory=PlacerConfig)

    def __post_init__(self):
        """Convert dicts to dataclass instances if needed."""
        if isinstance(self.fill, dict):
            self.fill = FillConfig(**self.fill)
        if isinstance(self.templates, dict):
            self.templates = TemplateSourceConfig(**self.templates)
        if isinstance(self.generation, dict):
            self.generation = GenerationConfig(**self.generation)
        if isinstance(self.ai, dict):
            self.ai = AIConfig(**self.ai)
        if isinstance(self.placer, dict):
            self.placer = PlacerConfig(**self.placer)

    @classmethod
    def from_yaml(cls, path: str) -> 'FillerConfig':
        """
        Load configuration from a YAML file.

        Raises:
            ConfigValidationError: If file doesn't exist or is invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigValidationError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Configuration file must contain a YAML mapping, got {type(data)}"
            )

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> 'FillerConfig':
        """Create FillerConfig from dictionary."""
        puzzle_data = data.get('puzzle') or {}
        config = cls(
            theme=puzzle_data.get('theme', cls.theme),
            difficulty=puzzle_data.get('difficulty', cls.difficulty),
        )

        sections = {
            'fill': FillConfig,
            'templates': TemplateSourceConfig,
            'generation': GenerationConfig,
            'ai': AIConfig,
            'placer': PlacerConfig,
        }
        for name, section_cls in sections.items():
            section = data.get(name)
            if section is None:
                continue
            if not isinstance(section, dict):
                raise ConfigValidationError(f"Section '{name}' must be a mapping")
            merged = asdict(getattr(config, name))
            unknown = set(section) - set(merged)
            if unknown:
                raise ConfigValidationError(
                    f"Unknown keys in '{name}': {sorted(unknown)}"
                )
            merged.update(section)
            setattr(config, name, section_cls(**merged))

        return config

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'FillerConfig':
        """Create configuration from command-line arguments."""
        config = cls()

        if getattr(args, 'theme', None):
            config.theme = args.theme
        if getattr(args, 'difficulty', None):
            config.difficulty = args.difficulty
        if getattr(args, 'templates', None):
            config.templates.path = args.templates
        if getattr(args, 'fit_attempts', None):
            config.fill.fit_attempts = args.fit_attempts
        if getattr(args, 'max_ai_callbacks', None):
            config.generation.max_ai_callbacks = args.max_ai_callbacks
        if getattr(args, 'prompt_config', None):
            config.ai.prompt_config = args.prompt_config
        if getattr(args, 'api_key', None):
            config.ai.api_key = args.api_key
        if getattr(args, 'model', None):
            config.ai.model = args.model

        return config

    @classmethod
    def merge(cls, yaml_config: 'FillerConfig', cli_config: 'FillerConfig') -> 'FillerConfig':
        """Merge configurations with CLI taking precedence over YAML."""
        merged = FillerConfig(
            theme=yaml_config.theme,
            difficulty=yaml_config.difficulty,
            fill=yaml_config.fill,
            templates=yaml_config.templates,
            generation=yaml_config.generation,
            ai=yaml_config.ai,
            placer=yaml_config.placer,
        )

        # Override with CLI values (non-default values)
        default = cls()

        if cli_config.theme != default.theme:
            merged.theme = cli_config.theme
        if cli_config.difficulty != default.difficulty:
            merged.difficulty = cli_config.difficulty
        if cli_config.templates.path:
            merged.templates.path = cli_config.templates.path
        if cli_config.fill.fit_attempts != default.fill.fit_attempts:
            merged.fill.fit_attempts = cli_config.fill.fit_attempts
        if (cli_config.generation.max_ai_callbacks !=
                default.generation.max_ai_callbacks):
            merged.generation.max_ai_callbacks = cli_config.generation.max_ai_callbacks
        if cli_config.ai.prompt_config != default.ai.prompt_config:
            merged.ai.prompt_config = cli_config.ai.prompt_config
        if cli_config.ai.api_key:
            merged.ai.api_key = cli_config.ai.api_key
        if cli_config.ai.model:
            merged.ai.model = cli_config.ai.model

        return merged

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> 'FillerConfig':
        """Apply CROSSWORD_FIT_ATTEMPTS and MIN_FIT_TOLERANCE overrides."""
        environ = os.environ if environ is None else environ
        for env_var, attr in (('CROSSWORD_FIT_ATTEMPTS', 'fit_attempts'),
                              ('MIN_FIT_TOLERANCE', 'min_fit_tolerance')):
            value = environ.get(env_var)
            if value is None or not value.strip():
                continue
            try:
                setattr(self.fill, attr, int(value))
            except ValueError:
                raise ConfigValidationError(f"{env_var} must be an integer, got {value!r}")
        return self

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.theme or not self.theme.strip():
            errors.append("Theme cannot be empty")

        if self.difficulty not in VALID_DIFFICULTIES:
            errors.append(
                f"Invalid difficulty '{self.difficulty}'. "
                f"Must be one of: {VALID_DIFFICULTIES}"
            )

        if self.fill.fit_attempts < 1:
            errors.append("fit_attempts must be at least 1")
        if self.fill.min_fit_tolerance < 0:
            errors.append("min_fit_tolerance must be non-negative")
        if self.fill.max_grid_size < MIN_WORD_COUNT:
            errors.append(f"max_grid_size must be at least {MIN_WORD_COUNT}")

        if self.generation.max_ai_callbacks < 0:
            errors.append("max_ai_callbacks must be non-negative")

        if not 0.0 <= self.ai.temperature <= 1.0:
            errors.append("temperature must be between 0.0 and 1.0")
        if self.ai.timeout <= 0 or self.placer.timeout <= 0:
            errors.append("timeouts must be positive")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'puzzle': {
                'theme': self.theme,
                'difficulty': self.difficulty,
            },
            'fill': asdict(self.fill),
            'templates': asdict(self.templates),
            'generation': asdict(self.generation),
            'ai': asdict(self.ai),
            'placer': asdict(self.placer),
        }


def discover_api_key(config: FillerConfig) -> Optional[str]:
    """
    Discover API key from multiple sources in priority order.

    Priority order:
    1. CLI argument or config file api_key field
    2. Environment variable (ANTHROPIC_API_KEY or custom)
    3. Anthropic config file (~/.anthropic/api_key)
    4. Anthropic config JSON (~/.config/anthropic/config.json)
    """
    if config.ai.api_key and config.ai.api_key != "null":
        return config.ai.api_key

    env_var = config.ai.api_key_env or "ANTHROPIC_API_KEY"
    if os.environ.get(env_var):
        return os.environ[env_var]

    anthropic_key_file = Path.home() / ".anthropic" / "api_key"
    if anthropic_key_file.exists():
        key = anthropic_key_file.read_text().strip()
        if key:
            return key

    anthropic_config = Path.home() / ".config" / "anthropic" / "config.json"
    if anthropic_config.exists():
        try:
            cfg = json.loads(anthropic_config.read_text())
            if cfg.get("api_key"):
                return cfg["api_key"]
        except (json.JSONDecodeError, AttributeError):
            pass

    return None


def get_model(config: FillerConfig) -> str:
    """
    Get AI model from config with fallback chain.

    Priority order:
    1. Config ai.model field (from CLI or config file)
    2. Environment variable (ANTHROPIC_MODEL or custom)
    3. Default model
    """
    if config.ai.model and config.ai.model != "null":
        return config.ai.model

    env_var = config.ai.model_env or "ANTHROPIC_MODEL"
    if os.environ.get(env_var):
        return os.environ[env_var]

    return DEFAULT_MODEL


def load_config(args: argparse.Namespace) -> FillerConfig:
    """
    Load configuration from command-line and/or YAML file.

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if getattr(args, 'config', None):
        base_config = FillerConfig.from_yaml(args.config)
    else:
        base_config = FillerConfig()

    # Environment overrides the file; CLI overrides both
    base_config.apply_env()
    config = FillerConfig.merge(base_config, FillerConfig.from_args(args))

    errors = config.validate()
    if errors:
        raise ConfigValidationError(
            "Configuration validation failed:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )

    return config
