import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path(__file__).with_name('solver.yaml')

LEVEL_ORDER = ('B', '1', '2', '3')

SHAPE_MODES = ('fixed', 'trees')


def _default_levels() -> Dict[str, List[str]]:
    return {
        'B': ['+', '-', '*', '/'],
        '1': ['+', '-', '*', '/', '^'],
        '2': ['+', '-', '*', '/', '^', 'sqrt', 'root'],
        '3': ['+', '-', '*', '/', '^', 'sqrt', 'root', '!'],
    }


def _default_weights() -> Dict[str, int]:
    return {'^': 5, 'sqrt': 6, 'root': 7, '!': 8}


@dataclass
class SolverSettings:
    """Tunable limits and weights used by the search engine."""
    power_ceiling: int = 10000
    factorial_limit: int = 10
    root_tolerance: float = 1e-5
    sigma_max_span: int = 20
    sigma_score: int = 100
    max_exact_solutions: int = 3
    shapes: str = 'fixed'
    merge_sigma_subsolutions: bool = True
    default_weight: int = 1
    operator_weights: Dict[str, int] = field(default_factory=_default_weights)
    levels: Dict[str, List[str]] = field(default_factory=_default_levels)

    def __post_init__(self):
        if self.shapes not in SHAPE_MODES:
            raise ValueError(f"Unknown shape mode: {self.shapes!r} (expected one of {', '.join(SHAPE_MODES)})")
        if self.max_exact_solutions < 1:
            raise ValueError("max_exact_solutions must be at least 1")
        unknown = [level for level in self.levels if level not in LEVEL_ORDER]
        if unknown:
            raise ValueError(f"Unknown levels in settings: {', '.join(unknown)}")

    @property
    def top_level(self) -> str:
        return LEVEL_ORDER[-1]

    def operators_for(self, level: str) -> List[str]:
        """Operator set for a level; unknown levels fall back to B."""
        if level not in self.levels:
            logger.warning("Unknown level %r, falling back to B", level)
            level = 'B'
        return list(self.levels[level])

    @classmethod
    def from_dict(cls, data: dict) -> 'SolverSettings':
        known = {name for name in cls.__dataclass_fields__}
        extra = set(data) - known
        if extra:
            raise ValueError(f"Unknown solver settings: {', '.join(sorted(extra))}")
        values = dict(data)
        if 'levels' in values:
            values['levels'] = {str(level): list(ops) for level, ops in values['levels'].items()}
        if 'operator_weights' in values:
            values['operator_weights'] = {str(op): int(w) for op, w in values['operator_weights'].items()}
        return cls(**values)


def level_rank(level: str) -> int:
    """Position of a level in B < 1 < 2 < 3; unknown levels rank as B."""
    try:
        return LEVEL_ORDER.index(level)
    except ValueError:
        return 0


class Config:
    def __init__(self, settings_file: Optional[str] = None):
        self.log_level = os.getenv('PUZZLE_LOG_LEVEL', 'INFO').upper()
        self.default_level = os.getenv('PUZZLE_DEFAULT_LEVEL', 'B')
        self.settings_file = Path(settings_file or os.getenv('PUZZLE_SETTINGS_FILE') or DEFAULT_SETTINGS_FILE)
        self.solver = self._load_settings()

        if self.default_level not in LEVEL_ORDER:
            raise ValueError(f"Invalid PUZZLE_DEFAULT_LEVEL: {self.default_level}")

    def _load_settings(self) -> SolverSettings:
        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.warning("Settings file %s not found, using defaults", self.settings_file)
            return SolverSettings()
        except yaml.YAMLError as e:
            logger.error("YAML parsing error in %s: %s", self.settings_file, e)
            raise

        if not data:
            logger.info("Empty settings file %s, using defaults", self.settings_file)
            return SolverSettings()
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.settings_file} must contain a mapping")

        return SolverSettings.from_dict(data)
