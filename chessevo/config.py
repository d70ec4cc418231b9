"""
Central configuration for the evolution run.
Pydantic models give type-safe, validated settings that can come from
environment variables, a JSON file, or the command line.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError


class EvolutionSettings(BaseModel):
    """Genetic algorithm settings."""

    population_size: int = Field(default=50, ge=2, description="Individuals per generation")
    generations: int = Field(default=10000, ge=0, description="Number of generations to evolve")
    mutation_frequency: float = Field(default=0.2, ge=0.0, le=1.0, description="Per-gene mutation probability")
    seed: Optional[int] = Field(default=None, description="Seed for the operator RNG (None = nondeterministic)")
    seed_report: Optional[str] = Field(default=None, description="Report to seed the initial population from")
    report_path: str = Field(default="report.json", description="Where the final population is written")

    @field_validator('population_size', 'generations', mode='before')
    @classmethod
    def validate_int_fields(cls, v):
        return int(v)

    @field_validator('mutation_frequency', mode='before')
    @classmethod
    def validate_float_fields(cls, v):
        return float(v)


class MatchSettings(BaseModel):
    """Rules applied when simulating games."""

    half_move_cap: int = Field(default=200, ge=1, description="Half-moves before the material tiebreak")
    material_tie_winner: str = Field(default="black", description="Side awarded the game on equal material")
    stalemate_rule: str = Field(default="loss", description="'loss': side to move loses; 'draw': split the point")

    @field_validator('half_move_cap', mode='before')
    @classmethod
    def validate_int_fields(cls, v):
        return int(v)

    @field_validator('material_tie_winner', mode='before')
    @classmethod
    def validate_tie_winner(cls, v):
        v_lower = str(v).lower()
        if v_lower not in ('white', 'black'):
            raise ValueError("material_tie_winner must be 'white' or 'black'")
        return v_lower

    @field_validator('stalemate_rule', mode='before')
    @classmethod
    def validate_stalemate_rule(cls, v):
        v_lower = str(v).lower()
        if v_lower not in ('loss', 'draw'):
            raise ValueError("stalemate_rule must be 'loss' or 'draw'")
        return v_lower


class EvaluationSettings(BaseModel):
    """Tournament evaluator settings."""

    executor: str = Field(default="process", description="'process', 'thread' or 'serial'")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Worker pool size (None = CPU count)")
    dispatch_retries: int = Field(default=3, ge=0, description="Retries when a pairing cannot be started")
    dispatch_order: str = Field(default="forward", description="Order pairings are submitted in")

    @field_validator('executor', mode='before')
    @classmethod
    def validate_executor(cls, v):
        v_lower = str(v).lower()
        if v_lower not in ('process', 'thread', 'serial'):
            raise ValueError("executor must be one of ['process', 'thread', 'serial']")
        return v_lower

    @field_validator('dispatch_order', mode='before')
    @classmethod
    def validate_dispatch_order(cls, v):
        v_lower = str(v).lower()
        if v_lower not in ('forward', 'reverse'):
            raise ValueError("dispatch_order must be 'forward' or 'reverse'")
        return v_lower

    def worker_count(self) -> int:
        return self.max_workers or os.cpu_count() or 1


class LoggingSettings(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_to_file: bool = Field(default=False, description="Write logs to file")
    log_file_path: str = Field(default="chessevo.log", description="Log file path")

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
        v_upper = v.upper() if isinstance(v, str) else str(v).upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper


class TrainerConfig(BaseModel):
    """Main configuration model for an evolution run."""

    evolution: EvolutionSettings = Field(default_factory=EvolutionSettings)
    match: MatchSettings = Field(default_factory=MatchSettings)
    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    version: str = Field(default="1.0.0", description="Configuration version")
    config_file: Optional[str] = Field(default=None, description="Path to config file")

    @classmethod
    def from_env(cls) -> 'TrainerConfig':
        """Create configuration from environment variables."""
        seed = os.getenv('CHESSEVO_SEED')
        workers = os.getenv('CHESSEVO_WORKERS')
        return cls(
            evolution=EvolutionSettings(
                population_size=os.getenv('CHESSEVO_POPULATION', '50'),
                generations=os.getenv('CHESSEVO_GENERATIONS', '10000'),
                mutation_frequency=os.getenv('CHESSEVO_MUTATION_FREQUENCY', '0.2'),
                seed=int(seed) if seed else None,
                report_path=os.getenv('CHESSEVO_REPORT', 'report.json'),
            ),
            match=MatchSettings(
                half_move_cap=os.getenv('CHESSEVO_HALF_MOVE_CAP', '200'),
            ),
            evaluation=EvaluationSettings(
                executor=os.getenv('CHESSEVO_EXECUTOR', 'process'),
                max_workers=int(workers) if workers else None,
            ),
            logging=LoggingSettings(
                log_level=os.getenv('CHESSEVO_LOG_LEVEL', 'INFO'),
                log_to_file=os.getenv('CHESSEVO_LOG_FILE', 'false').lower() == 'true',
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'evolution': self.evolution.model_dump(),
            'match': self.match.model_dump(),
            'evaluation': self.evaluation.model_dump(),
            'logging': self.logging.model_dump(),
            'version': self.version,
            'config_file': self.config_file,
        }

    def save_to_file(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        config_dict = self.to_dict()
        config_dict['config_file'] = filepath

        with open(filepath, 'w') as f:
            json.dump(config_dict, f, indent=2)

    @classmethod
    def load_from_file(cls, filepath: str) -> 'TrainerConfig':
        """Load configuration from JSON file."""
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"cannot read config file {filepath}: {e}") from e

        try:
            return cls(
                evolution=EvolutionSettings(**data.get('evolution', {})),
                match=MatchSettings(**data.get('match', {})),
                evaluation=EvaluationSettings(**data.get('evaluation', {})),
                logging=LoggingSettings(**data.get('logging', {})),
                version=data.get('version', '1.0.0'),
                config_file=filepath,
            )
        except ValidationError as e:
            raise ConfigurationError(f"invalid config file {filepath}: {e}") from e

    def update_from_dict(self, updates: Dict[str, Any]) -> None:
        """Update configuration from dictionary; unknown keys are ignored, values are validated."""
        for section, settings in updates.items():
            if hasattr(self, section) and isinstance(settings, dict):
                section_model = getattr(self, section)
                merged = section_model.model_dump()
                merged.update({k: v for k, v in settings.items() if k in merged})
                setattr(self, section, type(section_model)(**merged))


# Global configuration instance
_config: Optional[TrainerConfig] = None


def get_config() -> TrainerConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = TrainerConfig.from_env()
    return _config


def load_config_from_file(filepath: str) -> TrainerConfig:
    """Load configuration from file and update global instance."""
    global _config
    _config = TrainerConfig.load_from_file(filepath)
    return _config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _config
    _config = None


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """Configure root logging once."""
    if getattr(setup_logging, "_configured", False):
        return
    settings = settings or get_config().logging
    level: int = getattr(logging, settings.log_level, logging.INFO)
    handlers = [logging.StreamHandler()]
    if settings.log_to_file:
        handlers.append(logging.FileHandler(settings.log_file_path))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    setup_logging._configured = True  # type: ignore[attr-defined]
