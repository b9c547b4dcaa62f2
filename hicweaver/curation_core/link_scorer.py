#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Link scorer: how well the signal between two contig ends matches the
intra-contig decay expected of a true adjacency.

For two contigs A and B meeting at a junction, pixels dA and dB away from
the facing ends are (dA + dB + 1) apart in the joined sequence. If A and B
really are neighbours, the inter-contig cells near the junction corner
should follow the same decay curve as intra-contig cells at that distance.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import Any, List, Sequence, Tuple

import numpy as np

from .data_structures import (
    ContigLink,
    ContigRange,
    ORIENTATIONS,
    as_contact_matrix,
)

logger = logging.getLogger(__name__)

# Ranges shorter than this cannot be oriented reliably
MIN_SCORABLE_PIXELS = 4


def _score_link_view(
    m: np.ndarray,
    range_a: ContigRange,
    range_b: ContigRange,
    inverted_a: bool,
    inverted_b: bool,
    profile: np.ndarray,
    max_distance: int,
) -> float:
    len_a = range_a.length
    len_b = range_b.length
    if len_a < MIN_SCORABLE_PIXELS or len_b < MIN_SCORABLE_PIXELS:
        return 0.0

    max_distance = min(int(max_distance), len(profile) - 1)
    if max_distance < 1:
        return 0.0

    # Facing pixels: A's tail (or head when inverted), B's head (or tail)
    anchor_a = range_a.start if inverted_a else range_a.end - 1
    anchor_b = range_b.end - 1 if inverted_b else range_b.start
    step_a = 1 if inverted_a else -1
    step_b = -1 if inverted_b else 1

    d_a = np.arange(min(max_distance, len_a))
    d_b = np.arange(min(max_distance, len_b))
    da_grid, db_grid = np.meshgrid(d_a, d_b, indexing='ij')
    dist = (da_grid + db_grid + 1).ravel()
    rows = (anchor_a + step_a * da_grid).ravel()
    cols = (anchor_b + step_b * db_grid).ravel()

    n = m.shape[0]
    keep = (dist <= max_distance) & (rows >= 0) & (rows < n) & (cols >= 0) & (cols < n)
    if not keep.any():
        return 0.0
    dist = dist[keep]
    observed = m[rows[keep], cols[keep]].astype(np.float64)

    band_sums = np.bincount(dist, weights=observed, minlength=max_distance + 1)
    band_counts = np.bincount(dist, minlength=max_distance + 1)

    expected = profile[:max_distance + 1]
    usable = (band_counts > 0) & (expected > 0)
    usable[0] = False
    if not usable.any():
        return 0.0

    d_idx = np.nonzero(usable)[0]
    band_mean = band_sums[d_idx] / band_counts[d_idx]
    exp_d = expected[d_idx]
    band_scores = np.clip(1.0 - np.abs(band_mean - exp_d) / exp_d, 0.0, 1.0)
    weights = 1.0 / d_idx

    return float(np.sum(band_scores * weights) / np.sum(weights))


def score_link(
    matrix: Any,
    size: int,
    range_a: ContigRange,
    range_b: ContigRange,
    inverted_a: bool,
    inverted_b: bool,
    profile: np.ndarray,
    max_distance: int,
) -> float:
    """
    Score one contig pair under one relative orientation.

    Observed inter-contig values are grouped into bands of equal joined
    distance d. Each band is compared with the intra-contig expectation:

        band_d = clamp(1 - |observed_d - profile[d]| / profile[d], 0, 1)

    and the score is the 1/d-weighted mean of band_d, favouring cells closest
    to the junction.

    Args:
        matrix: Contact matrix (flat or 2-D)
        size: Matrix dimension
        range_a: Range of contig A
        range_b: Range of contig B
        inverted_a: Whether A is reversed (its head faces B)
        inverted_b: Whether B is reversed (its tail faces A)
        profile: Diagonal profile from compute_profile
        max_distance: Sampling window in pixels

    Returns:
        Score in [0, 1]; 0 for degenerate inputs.
    """
    m = as_contact_matrix(matrix, size)
    return _score_link_view(
        m, range_a, range_b, inverted_a, inverted_b,
        np.asarray(profile, dtype=np.float64), max_distance,
    )


def score_orientations(
    matrix: Any,
    size: int,
    range_a: ContigRange,
    range_b: ContigRange,
    profile: np.ndarray,
    max_distance: int,
) -> Tuple[float, float, float, float]:
    """Scores for the four orientations in [HH, HT, TH, TT] order."""
    m = as_contact_matrix(matrix, size)
    profile = np.asarray(profile, dtype=np.float64)
    return tuple(
        _score_link_view(m, range_a, range_b, *orientation.flags, profile, max_distance)
        for orientation in ORIENTATIONS
    )


def compute_candidate_links(
    matrix: Any,
    size: int,
    ranges: Sequence[ContigRange],
    profile: np.ndarray,
    max_distance: int,
    signal_cutoff: float,
) -> List[ContigLink]:
    """
    Score every contig pair and keep those passing the signal cutoff.

    Links are indexed by position in `ranges` and returned in pair order
    (i ascending, then j ascending); callers sort as needed.

    Args:
        matrix: Contact matrix (flat or 2-D)
        size: Matrix dimension
        ranges: Contig ranges in display order
        profile: Diagonal profile from compute_profile
        max_distance: Sampling window in pixels
        signal_cutoff: Minimum best score for a pair to be kept

    Returns:
        List of ContigLink
    """
    m = as_contact_matrix(matrix, size)
    profile = np.asarray(profile, dtype=np.float64)
    links: List[ContigLink] = []

    for i in range(len(ranges)):
        for j in range(i + 1, len(ranges)):
            scores = tuple(
                _score_link_view(m, ranges[i], ranges[j], *orientation.flags,
                                 profile, max_distance)
                for orientation in ORIENTATIONS
            )
            best_idx = int(np.argmax(scores))
            best_score = scores[best_idx]
            if best_score >= signal_cutoff:
                links.append(ContigLink(
                    i=i,
                    j=j,
                    score=best_score,
                    orientation=ORIENTATIONS[best_idx],
                    all_scores=scores,
                ))

    logger.debug(
        f"Scored {len(ranges) * (len(ranges) - 1) // 2} contig pairs, "
        f"{len(links)} passed signal cutoff {signal_cutoff}"
    )
    return links


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
