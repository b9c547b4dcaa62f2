#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Curation I/O: load contact matrices and contig tables, write sort and cut
reports.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import numpy as np

from ..curation_core.data_structures import Chain, ContigSpan, CutResult

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('name', 'pixel_start', 'pixel_end')
NPZ_MATRIX_KEY = 'contact_map'


class CurationInputError(ValueError):
    """Raised when a matrix or contig table cannot be used."""
    pass


# ============================================================================
#                           CONTIG TABLE
# ============================================================================

@dataclass
class ContigTable:
    """
    Contig geometry read from a TSV table.

    Attributes:
        contigs: One ContigSpan per table row, indexed by contig id (row number)
        order: Contig ids in display order
    """
    contigs: list[ContigSpan] = field(default_factory=list)
    order: list[int] = field(default_factory=list)

    @property
    def full_resolution_size(self) -> int:
        """Total span of all contigs in full-resolution pixels."""
        return sum(c.pixel_length for c in self.contigs)

    @property
    def names(self) -> list[str]:
        return [c.name or f"contig_{i}" for i, c in enumerate(self.contigs)]

    def __len__(self) -> int:
        return len(self.contigs)


def _parse_int(value: str, column: str, line_num: int) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise CurationInputError(
            f"Line {line_num}: column '{column}' must be an integer, got '{value}'"
        ) from e


def load_contig_table(tsv_path: str | Path) -> ContigTable:
    """
    Parse a tab-separated contig table.

    TSV Format:
    -----------
    Header row naming the columns: name, pixel_start, pixel_end, and an
    optional order column giving each contig's display position.
    Without an order column the row order is the display order.

    Lines starting with '#' are treated as comments and ignored.
    Empty lines are ignored.

    Args:
        tsv_path: Path to the contig table

    Returns:
        ContigTable

    Raises:
        CurationInputError: If the file is missing or malformed

    Example TSV content:
        name    pixel_start    pixel_end    order
        ctg1    0              1200         1
        ctg2    1200           2000         0
    """
    tsv_path = Path(tsv_path)
    logger.info(f"Loading contig table: {tsv_path}")

    if not tsv_path.exists():
        raise CurationInputError(f"Contig table not found: {tsv_path}")

    header: list[str] | None = None
    contigs: list[ContigSpan] = []
    positions: list[int] = []

    with open(tsv_path, 'r') as f:
        for line_num, line in enumerate(f, start=1):
            line = line.rstrip('\n\r')

            # Skip comments and empty lines
            if not line.strip() or line.startswith('#'):
                continue

            parts = [p.strip() for p in line.split('\t')]

            if header is None:
                header = parts
                missing = [c for c in REQUIRED_COLUMNS if c not in header]
                if missing:
                    raise CurationInputError(
                        f"Line {line_num}: header is missing column(s): {', '.join(missing)}"
                    )
                continue

            if len(parts) < len(header):
                raise CurationInputError(
                    f"Line {line_num}: expected {len(header)} columns, got {len(parts)}"
                )
            row = dict(zip(header, parts))

            start = _parse_int(row['pixel_start'], 'pixel_start', line_num)
            end = _parse_int(row['pixel_end'], 'pixel_end', line_num)
            if end < start:
                raise CurationInputError(
                    f"Line {line_num}: pixel_end ({end}) is before pixel_start ({start})"
                )
            contigs.append(ContigSpan(pixel_start=start, pixel_end=end, name=row['name']))
            if 'order' in row:
                positions.append(_parse_int(row['order'], 'order', line_num))

    if header is None:
        raise CurationInputError(f"Contig table is empty: {tsv_path}")

    if 'order' in header:
        if sorted(positions) != list(range(len(contigs))):
            raise CurationInputError(
                f"Column 'order' must be a permutation of 0..{len(contigs) - 1}"
            )
        order = sorted(range(len(contigs)), key=lambda i: positions[i])
    else:
        order = list(range(len(contigs)))

    logger.info(f"Loaded {len(contigs)} contigs from {tsv_path}")
    return ContigTable(contigs=contigs, order=order)


# ============================================================================
#                           CONTACT MATRIX
# ============================================================================

def load_contact_matrix(path: str | Path) -> np.ndarray:
    """
    Load a square contact matrix.

    .npy files hold one 2-D array. .npz archives use the array named
    'contact_map' if present, otherwise the first array. Anything else is
    read as whitespace-delimited text.

    Raises:
        CurationInputError: If the file is missing or not a square matrix
    """
    path = Path(path)
    if not path.exists():
        raise CurationInputError(f"Matrix file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == '.npy':
            matrix = np.load(path, allow_pickle=False)
        elif suffix == '.npz':
            with np.load(path, allow_pickle=False) as archive:
                if not archive.files:
                    raise CurationInputError(f"Archive contains no arrays: {path}")
                key = NPZ_MATRIX_KEY if NPZ_MATRIX_KEY in archive.files else archive.files[0]
                matrix = archive[key]
        else:
            matrix = np.loadtxt(path, dtype=np.float32, ndmin=2)
    except CurationInputError:
        raise
    except (OSError, ValueError) as e:
        raise CurationInputError(f"Could not read matrix {path}: {e}") from e

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise CurationInputError(
            f"Contact matrix must be square, got shape {matrix.shape} from {path}"
        )

    logger.info(f"Loaded {matrix.shape[0]}x{matrix.shape[1]} contact matrix from {path}")
    return np.asarray(matrix, dtype=np.float32)


# ============================================================================
#                           REPORTS
# ============================================================================

def chains_to_order(
    chains: Sequence[Chain],
    contig_order: Sequence[int],
) -> list[tuple[int, bool]]:
    """
    Flatten chains into a new display order.

    Args:
        chains: Chains of order indices from sort_contigs
        contig_order: Current display order (contig ids)

    Returns:
        (contig_id, inverted) pairs in the new display order
    """
    return [
        (contig_order[entry.order_index], entry.inverted)
        for chain in chains
        for entry in chain
    ]


def write_chains(
    chains: Sequence[Chain],
    contig_order: Sequence[int],
    names: Sequence[str],
    output_path: str | Path,
) -> None:
    """Write chains as TSV: chain, position, order_index, contig, inverted."""
    output_path = Path(output_path)
    logger.info(f"Writing {len(chains)} chains to {output_path}")

    with open(output_path, 'w') as f:
        f.write("chain\tposition\torder_index\tcontig\tinverted\n")
        for chain_idx, chain in enumerate(chains):
            for position, entry in enumerate(chain):
                name = names[contig_order[entry.order_index]]
                f.write(
                    f"{chain_idx}\t{position}\t{entry.order_index}\t{name}\t"
                    f"{'true' if entry.inverted else 'false'}\n"
                )


def write_breakpoints(
    result: CutResult,
    contig_order: Sequence[int],
    names: Sequence[str],
    output_path: str | Path,
) -> None:
    """Write breakpoints as TSV: order_index, contig, offset, confidence."""
    output_path = Path(output_path)
    logger.info(f"Writing {result.total_breakpoints} breakpoints to {output_path}")

    with open(output_path, 'w') as f:
        f.write("order_index\tcontig\toffset\tconfidence\n")
        for order_index in sorted(result.breakpoints):
            name = names[contig_order[order_index]]
            for bp in result.breakpoints[order_index]:
                f.write(f"{order_index}\t{name}\t{bp.offset}\t{bp.confidence:.4f}\n")


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
