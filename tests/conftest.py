#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Pytest configuration and shared fixtures.

Synthetic contact maps are built with numpy; intra-contig signal follows
base_value / sqrt(d) so the diagonal profile is known in closed form.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest

from hicweaver.curation_core import ContigRange, ContigSpan


def _make_adjacency_map(size, ranges, adjacencies, base_value=2.0, corner=10, max_d=20):
    """
    Contact map with intra-contig decay and strong tail-to-head corners.

    For every (i, j) in adjacencies, the block joining the tail of ranges[i]
    to the head of ranges[j] carries base_value / sqrt(di + dj + 1) for
    di, dj < corner.
    """
    matrix = np.zeros((size, size), dtype=np.float32)

    # Intra-contig diagonal signal
    for r in ranges:
        for p in range(r.start, r.end):
            for d in range(1, max_d + 1):
                if p + d >= r.end:
                    break
                value = base_value / np.sqrt(d)
                matrix[p, p + d] = value
                matrix[p + d, p] = value

    # Inter-contig signal for adjacent pairs (tail of i, head of j)
    for i, j in adjacencies:
        ri, rj = ranges[i], ranges[j]
        for di in range(corner):
            row = ri.end - 1 - di
            if row < ri.start:
                break
            for dj in range(corner):
                col = rj.start + dj
                if col >= rj.end:
                    break
                value = base_value / np.sqrt(di + dj + 1)
                if row < size and col < size:
                    matrix[row, col] = value
                    matrix[col, row] = value

    return matrix


def _make_gap_map(size, gap_start, gap_end, signal_value=1.0, max_d=10):
    """Flat diagonal band with no signal touching pixels in [gap_start, gap_end)."""
    matrix = np.zeros((size, size), dtype=np.float32)
    for i in range(size):
        in_gap = gap_start <= i < gap_end
        for d in range(1, max_d + 1):
            if i + d >= size:
                break
            other_in_gap = gap_start <= i + d < gap_end
            value = 0.0 if (in_gap or other_in_gap) else signal_value
            matrix[i, i + d] = value
            matrix[i + d, i] = value
    return matrix


def _make_uniform_map(size, value, max_d=10):
    """Constant band of width max_d around the diagonal (diagonal included)."""
    matrix = np.zeros((size, size), dtype=np.float32)
    for i in range(size):
        for d in range(0, max_d + 1):
            if i + d < size:
                matrix[i, i + d] = value
                matrix[i + d, i] = value
    return matrix


@pytest.fixture
def adjacency_map():
    """Factory for maps with engineered contig adjacencies."""
    return _make_adjacency_map


@pytest.fixture
def gap_map():
    """Factory for maps with a signal gap (simulated misassembly)."""
    return _make_gap_map


@pytest.fixture
def uniform_map():
    """Factory for maps with a uniform diagonal band."""
    return _make_uniform_map


@pytest.fixture
def four_ranges():
    """Four 32px contigs tiling a 128px matrix."""
    return [ContigRange(start=k * 32, end=(k + 1) * 32, order_index=k) for k in range(4)]


@pytest.fixture
def four_spans():
    """ContigSpans matching four_ranges at full resolution == overview."""
    return [ContigSpan(pixel_start=k * 32, pixel_end=(k + 1) * 32, name=f"ctg{k}")
            for k in range(4)]


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="hicweaver_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
