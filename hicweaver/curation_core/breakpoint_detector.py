#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Breakpoint detector: find chimeric joins inside single contigs.

Inside a coherent contig, the contacts that bridge any interior offset decay
with distance exactly like the genome-wide intra-contig profile. Where two
unrelated sequences were concatenated, the bridging contacts collapse. The
detector turns each contig into an observed/expected junction signal, tracks
a local baseline, and reports sufficiently deep and wide dips.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import Any, List, Sequence

import numpy as np
from scipy import ndimage

from .data_structures import Breakpoint, ContigRange, CutParams, as_contact_matrix

logger = logging.getLogger(__name__)

# Local baseline: upper-quartile filter spanning this many windows
BASELINE_PERCENTILE = 75
BASELINE_WINDOWS = 8
MIN_REGION_WIDTH = 3


# ============================================================================
#                         JUNCTION SIGNAL
# ============================================================================

def compute_junction_signal(
    matrix: Any,
    size: int,
    contig_range: ContigRange,
    profile: np.ndarray,
    window_size: int,
) -> np.ndarray:
    """
    Observed/expected ratio of the contacts bridging each offset of a contig.

    For offset k the bridging cells at distance d are (x, x+d) with
    x < start+k <= x+d, both ends inside the contig. The signal is the mean
    over d = 1..window_size of observed_d / profile[d].

    Args:
        matrix: Contact matrix (flat or 2-D)
        size: Matrix dimension
        contig_range: Contig range in matrix coordinates
        profile: Diagonal profile from compute_profile
        window_size: Largest distance to sample

    Returns:
        float64 array with one value per contig pixel; index 0 mirrors index 1.
    """
    length = contig_range.length
    signal = np.zeros(length, dtype=np.float64)
    if length < 2:
        return signal

    m = as_contact_matrix(matrix, size)
    profile = np.asarray(profile, dtype=np.float64)
    start = max(0, int(contig_range.start))
    end = min(m.shape[0], int(contig_range.end))
    if end - start < 2:
        return signal

    block = m[start:end, start:end]
    span = end - start
    # Offsets are measured from the declared start; clipping only trims cells
    shift = start - int(contig_range.start)
    offsets = np.arange(1, length)
    local = offsets - shift

    ratio_sum = np.zeros(length - 1, dtype=np.float64)
    ratio_count = np.zeros(length - 1, dtype=np.int64)

    max_d = min(int(window_size), len(profile) - 1, span - 1)
    for d in range(1, max_d + 1):
        expected = profile[d]
        if expected <= 0:
            continue
        band = np.diagonal(block, offset=d).astype(np.float64)
        cumulative = np.concatenate(([0.0], np.cumsum(band)))
        lo = np.clip(local - d, 0, band.size)
        hi = np.clip(local, 0, band.size)
        count = hi - lo
        has_cells = count > 0
        observed = np.zeros_like(ratio_sum)
        observed[has_cells] = (
            cumulative[hi[has_cells]] - cumulative[lo[has_cells]]
        ) / count[has_cells]
        ratio_sum[has_cells] += observed[has_cells] / expected
        ratio_count[has_cells] += 1

    populated = ratio_count > 0
    signal[1:][populated] = ratio_sum[populated] / ratio_count[populated]
    signal[0] = signal[1]
    return signal


# ============================================================================
#                         DIP DETECTION
# ============================================================================

def _merge_nearby(breakpoints: List[Breakpoint], merge_distance: int) -> List[Breakpoint]:
    """Collapse breakpoints within merge_distance, keeping the most confident."""
    if not breakpoints:
        return []
    ordered = sorted(breakpoints, key=lambda bp: bp.offset)
    merged = [ordered[0]]
    for bp in ordered[1:]:
        if bp.offset - merged[-1].offset <= merge_distance:
            if bp.confidence > merged[-1].confidence:
                merged[-1] = bp
        else:
            merged.append(bp)
    return merged


def _enforce_min_fragment(
    breakpoints: List[Breakpoint],
    length: int,
    min_size: int,
) -> List[Breakpoint]:
    """Drop cuts that would leave fragments shorter than min_size."""
    kept: List[Breakpoint] = []
    last = 0
    for bp in breakpoints:
        if bp.offset <= 0 or bp.offset >= length:
            continue
        if bp.offset - last < min_size or length - bp.offset < min_size:
            continue
        kept.append(bp)
        last = bp.offset
    return kept


def detect_breakpoints(
    signal: Sequence[float],
    window_size: int,
    cut_threshold: float,
    min_fragment_size: int,
) -> List[Breakpoint]:
    """
    Find dips in a per-offset signal relative to its local baseline.

    The baseline is a rolling upper-quartile filter, so it tracks gradual
    changes in signal level but ignores dips narrower than most of its span.
    Low runs narrower than max(3, window_size // 2) are ignored; each
    remaining run yields a candidate at its midpoint whose confidence is the
    deepest relative drop in the run.

    Args:
        signal: Per-offset signal for one contig
        window_size: Sampling window; sets baseline span, run width and
            merge distance
        cut_threshold: Relative drop below baseline marking a low position
        min_fragment_size: Minimum distance between cuts and from the ends

    Returns:
        Breakpoints sorted by offset, with 0 < offset < len(signal)
    """
    values = np.asarray(signal, dtype=np.float64)
    length = values.size
    if length == 0 or length < 2 * min_fragment_size:
        return []
    if not np.any(values > 0):
        return []

    window_size = max(1, int(window_size))
    baseline = ndimage.percentile_filter(
        values,
        BASELINE_PERCENTILE,
        size=BASELINE_WINDOWS * window_size + 1,
        mode='nearest',
    )
    drop = np.zeros(length, dtype=np.float64)
    positive = baseline > 0
    drop[positive] = (baseline[positive] - values[positive]) / baseline[positive]

    labels, num_regions = ndimage.label(drop > cut_threshold)
    min_width = max(MIN_REGION_WIDTH, window_size // 2)

    candidates: List[Breakpoint] = []
    for region in ndimage.find_objects(labels):
        run = region[0]
        if run.stop - run.start < min_width:
            continue
        confidence = float(np.clip(drop[run].max(), 0.0, 1.0))
        candidates.append(Breakpoint(offset=(run.start + run.stop) // 2, confidence=confidence))

    merged = _merge_nearby(candidates, window_size)
    result = _enforce_min_fragment(merged, length, min_fragment_size)
    logger.debug(
        f"{num_regions} low regions, {len(candidates)} wide enough, "
        f"{len(result)} breakpoints after fragment filtering"
    )
    return result


def detect_contig_breakpoints(
    matrix: Any,
    size: int,
    contig_range: ContigRange,
    profile: np.ndarray,
    params: CutParams,
) -> List[Breakpoint]:
    """
    Detect breakpoints inside one contig.

    Contigs shorter than twice the minimum fragment size are skipped.

    Returns:
        Breakpoints local to the contig (0 < offset < contig length) whose
        confidence exceeds params.min_confidence.
    """
    if contig_range.length < 2 * params.min_fragment_size:
        logger.debug(
            f"Contig {contig_range.order_index}: {contig_range.length}px below "
            f"analysis window, skipped"
        )
        return []

    signal = compute_junction_signal(
        matrix, size, contig_range, profile, params.window_size
    )
    breakpoints = detect_breakpoints(
        signal, params.window_size, params.cut_threshold, params.min_fragment_size
    )
    return [bp for bp in breakpoints if bp.confidence > params.min_confidence]


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
