"""
Plain-value operations consumed by request handlers.

Each operation takes strings and integers, validates encoded inputs before
decoding, and returns a DNA or a number. Nothing here touches shared state.
"""

from typing import Optional

import numpy as np

from .codec import decode_dna, is_valid
from .dna import DNA
from .errors import InvalidEncoding
from .operators import DEFAULT_MUTATION_RATE, compare_dna, merge_dna, zero_gene


def _require_valid(*encoded: str) -> None:
    for value in encoded:
        if not is_valid(value):
            raise InvalidEncoding("DNA string not valid")


def generate(
    pool_size: int,
    gene_size: int,
    rng: Optional[np.random.Generator] = None,
) -> DNA:
    """Generate a random DNA. Bounds are the caller's concern."""
    return DNA.new(pool_size, gene_size, rng=rng)


def decode(encoded: str) -> DNA:
    """Decode an encoded DNA, raising DecodeError when malformed."""
    return decode_dna(encoded)


def compare(encoded1: str, encoded2: str) -> float:
    """Similarity of two encoded DNA."""
    _require_valid(encoded1, encoded2)
    return compare_dna(decode_dna(encoded1), decode_dna(encoded2))


def merge(
    encoded1: str,
    encoded2: str,
    allow_mutation: bool = True,
    rng: Optional[np.random.Generator] = None,
    mutation_rate: float = DEFAULT_MUTATION_RATE,
) -> DNA:
    """Recombine two encoded DNA into a child."""
    _require_valid(encoded1, encoded2)
    return merge_dna(
        decode_dna(encoded1),
        decode_dna(encoded2),
        allow_mutation,
        rng=rng,
        mutation_rate=mutation_rate,
    )


def zero_at(encoded: str, position: int) -> DNA:
    """Decode, then clear the gene at position."""
    return zero_gene(decode_dna(encoded), position)
