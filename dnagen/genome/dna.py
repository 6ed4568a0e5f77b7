"""
Genome representation: a fixed-shape pool of fixed-width binary genes.

A DNA value holds ``pool_size`` genes, each ``gene_size`` bits wide. DNA and
Gene are value types: every DNA owns its genes, copies are deep, and no gene
is ever shared between two DNA instances.

Key features:
- Random generation from an injectable numpy Generator
- Canonical string form (see codec.py) via to_string / from_string
- Latent projection: one normalized float per gene
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Tuple

import numpy as np
from loguru import logger

from .errors import PositionOutOfRange


@dataclass(eq=False)
class Gene:
    """
    A fixed-width unit of genetic information.

    Attributes:
        bits: 1-D uint8 array of 0/1 values, most significant bit first
    """
    bits: np.ndarray

    def __post_init__(self):
        bits = np.array(self.bits, dtype=np.uint8).reshape(-1)
        if bits.size and bits.max() > 1:
            raise ValueError("Gene bits must be 0 or 1")
        self.bits = bits

    @classmethod
    def from_int(cls, value: int, size: int) -> 'Gene':
        """Build a gene of ``size`` bits holding the unsigned integer ``value``."""
        if value < 0 or value >> size:
            raise ValueError(f"Value {value} does not fit in {size} bits")
        return cls(np.array(
            [(value >> (size - 1 - i)) & 1 for i in range(size)],
            dtype=np.uint8,
        ))

    @property
    def size(self) -> int:
        """Width in bits."""
        return int(self.bits.size)

    @property
    def value(self) -> int:
        """Unsigned integer value of the bits."""
        if not self.size:
            return 0
        return int(''.join('1' if b else '0' for b in self.bits.tolist()), 2)

    def zero(self) -> None:
        """Clear every bit in place."""
        self.bits[:] = 0

    def copy(self) -> 'Gene':
        return Gene(self.bits.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Gene):
            return NotImplemented
        return np.array_equal(self.bits, other.bits)

    def __repr__(self) -> str:
        return f"Gene({''.join(str(b) for b in self.bits.tolist())})"


@dataclass(eq=False)
class DNA:
    """
    Ordered pool of genes with uniform width.

    Attributes:
        pool_size: Number of genes
        gene_size: Bits per gene
        genes: The gene pool, exactly pool_size genes of gene_size bits
    """
    pool_size: int
    gene_size: int
    genes: List[Gene] = field(default_factory=list)

    def __post_init__(self):
        """Validate shape consistency."""
        if self.pool_size < 0:
            raise ValueError(f"pool_size must be non-negative, got {self.pool_size}")
        if self.gene_size < 0:
            raise ValueError(f"gene_size must be non-negative, got {self.gene_size}")
        if len(self.genes) != self.pool_size:
            raise ValueError(
                f"Gene count ({len(self.genes)}) must match pool_size ({self.pool_size})"
            )
        for i, gene in enumerate(self.genes):
            if gene.size != self.gene_size:
                raise ValueError(
                    f"Gene {i} has {gene.size} bits, expected gene_size {self.gene_size}"
                )

    @classmethod
    def new(
        cls,
        pool_size: int,
        gene_size: int,
        rng: Optional[np.random.Generator] = None,
    ) -> 'DNA':
        """
        Generate a DNA with uniformly random bits.

        Args:
            pool_size: Number of genes
            gene_size: Bits per gene
            rng: Random source; a fresh unseeded generator when None

        Returns:
            A new DNA of the requested shape
        """
        if pool_size < 0 or gene_size < 0:
            raise ValueError(
                f"pool_size and gene_size must be non-negative, got {pool_size}, {gene_size}"
            )
        if rng is None:
            rng = np.random.default_rng()
        matrix = rng.integers(0, 2, size=(pool_size, gene_size), dtype=np.uint8)
        logger.debug("Generated DNA pool_size={} gene_size={}", pool_size, gene_size)
        return cls.from_matrix(matrix)

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> 'DNA':
        """Create DNA from a (pool_size, gene_size) bit matrix."""
        matrix = np.asarray(matrix, dtype=np.uint8)
        if matrix.ndim != 2:
            raise ValueError(f"Bit matrix must be 2-D, got shape {matrix.shape}")
        pool_size, gene_size = matrix.shape
        return cls(
            pool_size=int(pool_size),
            gene_size=int(gene_size),
            genes=[Gene(row) for row in matrix],
        )

    @classmethod
    def from_string(cls, encoded: str) -> 'DNA':
        """Decode a canonical DNA string. Raises DecodeError when invalid."""
        # Import here to avoid circular dependency
        from .codec import decode_dna
        return decode_dna(encoded)

    @staticmethod
    def is_valid(encoded: str) -> bool:
        """Check whether a string is a well-formed encoded DNA."""
        from .codec import is_valid
        return is_valid(encoded)

    @property
    def shape(self) -> Tuple[int, int]:
        """(pool_size, gene_size)."""
        return (self.pool_size, self.gene_size)

    def to_string(self) -> str:
        """Canonical string form, inverse of from_string."""
        from .codec import encode_dna
        return encode_dna(self)

    def to_matrix(self) -> np.ndarray:
        """Return a fresh (pool_size, gene_size) uint8 bit matrix."""
        return np.array(
            [gene.bits for gene in self.genes], dtype=np.uint8
        ).reshape(self.pool_size, self.gene_size)

    def to_latent_vec(self) -> np.ndarray:
        """
        Project the gene pool onto a flat numeric vector.

        Each gene maps to its integer value normalized to [0, 1], so the
        vector always has exactly pool_size elements, in gene order.
        """
        # gene_size is only bounded by the body length when genes exist
        if self.pool_size == 0 or self.gene_size == 0:
            return np.zeros(self.pool_size, dtype=np.float64)
        max_value = 2 ** self.gene_size - 1
        return np.array(
            [gene.value / max_value for gene in self.genes], dtype=np.float64
        )

    def zero_at(self, position: int) -> None:
        """
        Clear the gene at ``position`` in place.

        Raises:
            PositionOutOfRange: If position is not in [0, pool_size)
        """
        if not 0 <= position < self.pool_size:
            raise PositionOutOfRange(position, self.pool_size)
        self.genes[position].zero()
        logger.debug("Zeroed gene {} of {}", position, self.pool_size)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON-serializable transport payload.

        raw_size is the length of raw_value, i.e. pool_size.
        """
        latent = self.to_latent_vec()
        return {
            'pool_size': self.pool_size,
            'gene_size': self.gene_size,
            'dna_str': self.to_string(),
            'raw_value': latent.tolist(),
            'raw_size': len(latent),
        }

    def copy(self) -> 'DNA':
        """Create a deep copy of this DNA."""
        return DNA(
            pool_size=self.pool_size,
            gene_size=self.gene_size,
            genes=[gene.copy() for gene in self.genes],
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, DNA):
            return NotImplemented
        return self.shape == other.shape and all(
            g1 == g2 for g1, g2 in zip(self.genes, other.genes)
        )

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"DNA(pool_size={self.pool_size}, gene_size={self.gene_size})"


def create_random_dna(
    pool_size: int,
    gene_size: int,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> DNA:
    """
    Create a random DNA, optionally reproducible.

    Args:
        pool_size: Number of genes
        gene_size: Bits per gene
        seed: Seed for a fresh generator (ignored when rng is given)
        rng: Explicit random source

    Returns:
        A randomly initialized DNA
    """
    if rng is None:
        rng = np.random.default_rng(seed)
    return DNA.new(pool_size, gene_size, rng=rng)
