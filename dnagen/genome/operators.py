"""
Genome operators: similarity, crossover, mutation and point zeroing.

These operators never modify their inputs:
- compare_dna measures bitwise closeness of two same-shape DNA
- uniform_crossover picks each gene from one parent or the other
- mutate_dna flips bits at a configurable rate
- merge_dna chains crossover and optional mutation
- zero_gene clears a single gene on a copy
"""

import hashlib
from typing import Optional

import numpy as np
from loguru import logger

from .dna import DNA
from .errors import ShapeMismatch


DEFAULT_MUTATION_RATE = 0.01


def check_compatible(dna1: DNA, dna2: DNA) -> None:
    """Raise ShapeMismatch unless both DNA share pool_size and gene_size."""
    if dna1.shape != dna2.shape:
        raise ShapeMismatch(dna1.shape, dna2.shape)


# =============================================================================
# Similarity
# =============================================================================

def compare_dna(dna1: DNA, dna2: DNA) -> float:
    """
    Bitwise similarity between two DNA.

    Similarity is 1 - hamming_distance / total_bits, so identical DNA
    score 1.0 and fully complementary DNA score 0.0. DNA without any bits
    are identical by definition.

    Args:
        dna1: First DNA
        dna2: Second DNA, same shape as dna1

    Returns:
        Similarity in [0, 1]

    Raises:
        ShapeMismatch: If the shapes differ
    """
    check_compatible(dna1, dna2)
    total_bits = dna1.pool_size * dna1.gene_size
    if total_bits == 0:
        return 1.0
    distance = int(np.count_nonzero(dna1.to_matrix() != dna2.to_matrix()))
    return 1.0 - distance / total_bits


# =============================================================================
# Crossover and Mutation
# =============================================================================

def crossover_seed(dna1: DNA, dna2: DNA) -> int:
    """Seed derived from both parents, so crossover is reproducible."""
    payload = f"{dna1.to_string()}|{dna2.to_string()}".encode('ascii')
    return int.from_bytes(hashlib.sha256(payload).digest()[:8], 'big')


def uniform_crossover(dna1: DNA, dna2: DNA, swap_prob: float = 0.5) -> DNA:
    """
    Uniform crossover with gene-by-gene selection.

    Each gene position takes the whole gene from dna2 with probability
    swap_prob, otherwise from dna1. The selection mask is drawn from a
    generator seeded by crossover_seed, so the same parents always yield
    the same child.

    Args:
        dna1: First parent
        dna2: Second parent
        swap_prob: Probability of taking a gene from dna2

    Returns:
        Child DNA with the parents' shape

    Raises:
        ShapeMismatch: If the parents' shapes differ
    """
    check_compatible(dna1, dna2)
    mask_rng = np.random.default_rng(crossover_seed(dna1, dna2))
    take_second = mask_rng.random(dna1.pool_size) < swap_prob

    genes = [
        (g2 if second else g1).copy()
        for g1, g2, second in zip(dna1.genes, dna2.genes, take_second)
    ]
    return DNA(pool_size=dna1.pool_size, gene_size=dna1.gene_size, genes=genes)


def mutate_dna(
    dna: DNA,
    rng: Optional[np.random.Generator] = None,
    mutation_rate: float = DEFAULT_MUTATION_RATE,
) -> DNA:
    """
    Flip each bit independently with probability mutation_rate.

    Args:
        dna: DNA to mutate
        rng: Random source; a fresh unseeded generator when None
        mutation_rate: Per-bit flip probability in [0, 1]

    Returns:
        New mutated DNA (original is not modified)
    """
    if not 0.0 <= mutation_rate <= 1.0:
        raise ValueError(f"Mutation rate {mutation_rate} out of range [0, 1]")
    if rng is None:
        rng = np.random.default_rng()

    matrix = dna.to_matrix()
    flips = rng.random(matrix.shape) < mutation_rate
    matrix[flips] ^= 1
    logger.debug("Mutated {} of {} bits", int(flips.sum()), flips.size)
    return DNA.from_matrix(matrix)


def merge_dna(
    dna1: DNA,
    dna2: DNA,
    allow_mutation: bool,
    rng: Optional[np.random.Generator] = None,
    mutation_rate: float = DEFAULT_MUTATION_RATE,
) -> DNA:
    """
    Combine two parents into one child.

    Applies uniform_crossover, then mutate_dna when allow_mutation is set.
    Without mutation the result depends only on the parents.

    Args:
        dna1: First parent
        dna2: Second parent
        allow_mutation: Whether to mutate the recombined child
        rng: Random source for mutation
        mutation_rate: Per-bit flip probability

    Returns:
        Child DNA with the parents' shape

    Raises:
        ShapeMismatch: If the parents' shapes differ
        ValueError: If mutation_rate is outside [0, 1]
    """
    check_compatible(dna1, dna2)
    if not 0.0 <= mutation_rate <= 1.0:
        raise ValueError(f"Mutation rate {mutation_rate} out of range [0, 1]")

    child = uniform_crossover(dna1, dna2)
    if allow_mutation:
        child = mutate_dna(child, rng=rng, mutation_rate=mutation_rate)
    logger.debug(
        "Merged DNA pool_size={} gene_size={} mutation={}",
        child.pool_size, child.gene_size, allow_mutation,
    )
    return child


# =============================================================================
# Point Mutation
# =============================================================================

def zero_gene(dna: DNA, position: int) -> DNA:
    """
    Return a copy of dna with the gene at position cleared.

    Raises:
        PositionOutOfRange: If position is not in [0, pool_size)
    """
    child = dna.copy()
    child.zero_at(position)
    return child
