"""
Error types raised by the genome engine.

Every error is a ValueError so callers that already guard genome
construction with ``except ValueError`` keep working.
"""


class GenomeError(ValueError):
    """Base class for all genome engine errors."""


class InvalidEncoding(GenomeError):
    """An encoded DNA string failed structural validation."""


class DecodeError(InvalidEncoding):
    """Decoding was attempted on a malformed DNA string."""


class MergeError(GenomeError):
    """Two genomes could not be recombined."""


class ShapeMismatch(MergeError):
    """Operands differ in pool_size or gene_size (raised by merge and compare)."""

    def __init__(self, shape1, shape2):
        self.shape1 = tuple(shape1)
        self.shape2 = tuple(shape2)
        super().__init__(
            f"DNA shapes differ: pool_size/gene_size {self.shape1[0]}/{self.shape1[1]} "
            f"vs {self.shape2[0]}/{self.shape2[1]}"
        )


class PositionOutOfRange(GenomeError):
    """A gene index is outside the DNA's pool."""

    def __init__(self, position, pool_size):
        self.position = position
        self.pool_size = pool_size
        super().__init__(f"Invalid position: {position} (pool_size={pool_size})")
