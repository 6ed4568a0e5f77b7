"""
Genome engine: fixed-shape pools of fixed-width binary genes.

Key components:
- DNA / Gene: value types holding the gene pool
- Codec: canonical string encoding (is_valid, encode_dna, decode_dna)
- Operators: similarity, crossover, mutation and point zeroing
- Service: plain-value operations used by request handlers

Example usage:
    import numpy as np
    from dnagen.genome import DNA, compare_dna, merge_dna

    rng = np.random.default_rng(7)
    parent1 = DNA.new(pool_size=4, gene_size=8, rng=rng)
    parent2 = DNA.new(pool_size=4, gene_size=8, rng=rng)

    child = merge_dna(parent1, parent2, allow_mutation=True, rng=rng)
    print(child.to_string(), compare_dna(child, parent1))
"""

from .dna import DNA, Gene, create_random_dna
from .codec import is_valid, encode_dna, decode_dna, find_defect
from .errors import (
    GenomeError,
    InvalidEncoding,
    DecodeError,
    MergeError,
    ShapeMismatch,
    PositionOutOfRange,
)
from .operators import (
    DEFAULT_MUTATION_RATE,
    compare_dna,
    uniform_crossover,
    mutate_dna,
    merge_dna,
    zero_gene,
)

__all__ = [
    # Core classes
    'DNA',
    'Gene',
    'create_random_dna',
    # Codec
    'is_valid',
    'encode_dna',
    'decode_dna',
    'find_defect',
    # Errors
    'GenomeError',
    'InvalidEncoding',
    'DecodeError',
    'MergeError',
    'ShapeMismatch',
    'PositionOutOfRange',
    # Operators
    'DEFAULT_MUTATION_RATE',
    'compare_dna',
    'uniform_crossover',
    'mutate_dna',
    'merge_dna',
    'zero_gene',
]
