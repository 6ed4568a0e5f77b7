"""
Service configuration.

Defaults match the public API limits; every field can be overridden through
a DNAGEN_* environment variable (e.g. DNAGEN_MAX_POOL_SIZE=256).
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from .genome.operators import DEFAULT_MUTATION_RATE

ENV_PREFIX = 'DNAGEN_'
TRUE_VALUES = {'1', 'true', 'yes', 'on'}
FALSE_VALUES = {'0', 'false', 'no', 'off'}


@dataclass
class ServiceConfig:
    """Configuration for the DNA service."""
    # Request limits
    max_pool_size: int = 512
    max_gene_size: int = 512

    # Merge behaviour
    allow_mutation: bool = True
    mutation_rate: float = DEFAULT_MUTATION_RATE

    # Reproducibility
    seed: Optional[int] = None

    # Server
    host: str = '127.0.0.1'
    port: int = 8000
    debug: bool = False
    log_level: str = 'INFO'

    def __post_init__(self):
        if self.max_pool_size < 0 or self.max_gene_size < 0:
            raise ValueError("Size limits must be non-negative")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError(f"Mutation rate {self.mutation_rate} out of range [0, 1]")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ServiceConfig':
        """Build a config from DNAGEN_* variables, falling back to defaults."""
        if environ is None:
            environ = os.environ

        kwargs = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == '':
                continue
            kwargs[f.name] = _parse_value(f.name, raw, f.default)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_pool_size': self.max_pool_size,
            'max_gene_size': self.max_gene_size,
            'allow_mutation': self.allow_mutation,
            'mutation_rate': self.mutation_rate,
            'seed': self.seed,
            'host': self.host,
            'port': self.port,
            'debug': self.debug,
            'log_level': self.log_level,
        }


def _parse_value(name: str, raw: str, default: Any) -> Any:
    """Convert an environment string to the type of the field's default."""
    text = raw.strip()
    try:
        if isinstance(default, bool):
            lowered = text.lower()
            if lowered in TRUE_VALUES:
                return True
            if lowered in FALSE_VALUES:
                return False
            raise ValueError(text)
        if isinstance(default, int) or name == 'seed':
            return int(text)
        if isinstance(default, float):
            return float(text)
    except ValueError:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from None
    return text
