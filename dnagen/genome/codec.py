"""
Canonical string codec for DNA.

Format:
    <pool_size>x<gene_size>:<gene_0>-<gene_1>-...-<gene_{pool_size-1}>

- pool_size and gene_size are decimal, without sign or leading zeros
- each gene is exactly ceil(gene_size / 4) lowercase hex digits, most
  significant bit first; unused high bits of the first digit must be zero
- genes are joined by '-'; the body is empty when pool_size is 0, and every
  gene is the empty string when gene_size is 0 (e.g. '3x0:--')

Every DNA has exactly one encoding, so encode/decode are inverse bijections.

Example:
    >>> encode_dna(DNA.from_matrix([[1, 0, 1], [0, 1, 1]]))
    '2x3:5-3'
"""

import re
from typing import List, Optional, Tuple

from .dna import DNA, Gene
from .errors import DecodeError


HEADER_PATTERN = re.compile(r'(0|[1-9][0-9]{0,9})x(0|[1-9][0-9]{0,9}):')
GENE_ALPHABET = frozenset('0123456789abcdef')
GENE_SEPARATOR = '-'


def hex_width(gene_size: int) -> int:
    """Number of hex digits used to encode one gene."""
    return (gene_size + 3) // 4


def _parse_header(encoded: str) -> Optional[Tuple[int, int, int]]:
    """Return (pool_size, gene_size, body_start), or None when malformed."""
    match = HEADER_PATTERN.match(encoded)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2)), match.end()


def find_defect(encoded) -> Optional[str]:
    """
    Describe the first structural problem in an encoded DNA string.

    Returns None when the string is valid. The expected body length is
    checked before any per-character scan, so work stays linear in the
    input length.
    """
    if not isinstance(encoded, str):
        return f"expected a string, got {type(encoded).__name__}"
    if not encoded:
        return "empty string"

    header = _parse_header(encoded)
    if header is None:
        return "malformed header, expected '<pool_size>x<gene_size>:'"
    pool_size, gene_size, body_start = header

    width = hex_width(gene_size)
    stride = width + 1
    expected = pool_size * stride - 1 if pool_size else 0
    body_length = len(encoded) - body_start
    if body_length != expected:
        return f"body has {body_length} characters, expected {expected}"

    # Largest legal first digit when gene_size is not a multiple of 4
    lead_limit = 1 << (gene_size % 4) if gene_size % 4 else 16

    for pos in range(body_length):
        char = encoded[body_start + pos]
        offset = pos % stride
        if offset == width:
            if char != GENE_SEPARATOR:
                return f"expected '{GENE_SEPARATOR}' at body offset {pos}, found {char!r}"
        elif char not in GENE_ALPHABET:
            return f"invalid character {char!r} at body offset {pos}"
        elif offset == 0 and int(char, 16) >= lead_limit:
            return f"non-canonical padding bits in gene {pos // stride}"

    return None


def is_valid(encoded) -> bool:
    """Check whether a string is a well-formed encoded DNA."""
    return find_defect(encoded) is None


def encode_dna(dna: DNA) -> str:
    """Encode a DNA to its canonical string."""
    width = hex_width(dna.gene_size)
    if width:
        genes = [format(gene.value, f'0{width}x') for gene in dna.genes]
    else:
        genes = [''] * dna.pool_size
    return f"{dna.pool_size}x{dna.gene_size}:{GENE_SEPARATOR.join(genes)}"


def decode_dna(encoded: str) -> DNA:
    """
    Decode a canonical DNA string.

    Args:
        encoded: String produced by encode_dna

    Returns:
        The unique DNA whose encoding is ``encoded``

    Raises:
        DecodeError: If the string is not a valid encoding
    """
    defect = find_defect(encoded)
    if defect is not None:
        raise DecodeError(f"DNA string not valid: {defect}")

    pool_size, gene_size, body_start = _parse_header(encoded)
    chunks: List[str] = encoded[body_start:].split(GENE_SEPARATOR) if pool_size else []

    genes = [
        Gene.from_int(int(chunk, 16) if chunk else 0, gene_size)
        for chunk in chunks
    ]
    return DNA(pool_size=pool_size, gene_size=gene_size, genes=genes)
