#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Contact decay P(s): mean contact frequency against genomic distance.

The intra-contig diagonal profile is fitted with a power law in log-log
space. For a well-assembled Hi-C map the exponent is typically between
-1.5 and -0.8.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np
from scipy import stats

from ..curation_core.data_structures import ContigRange
from ..curation_core.diagonal_profile import compute_profile

logger = logging.getLogger(__name__)

TYPICAL_EXPONENT_RANGE = (-1.5, -0.8)
DEFAULT_MAX_DISTANCE_CAP = 500


@dataclass
class ContactDecayResult:
    """
    P(s) curve and its log-log power-law fit.

    Attributes:
        distances: Diagonal distances with positive mean contact
        mean_contacts: Mean contact frequency at each distance
        log_distances: log10(distances)
        log_contacts: log10(mean_contacts)
        decay_exponent: Slope of the log-log fit
        r_squared: Coefficient of determination of the fit
        max_distance: Largest distance computed
    """
    distances: np.ndarray = field(default_factory=lambda: np.zeros(0))
    mean_contacts: np.ndarray = field(default_factory=lambda: np.zeros(0))
    log_distances: np.ndarray = field(default_factory=lambda: np.zeros(0))
    log_contacts: np.ndarray = field(default_factory=lambda: np.zeros(0))
    decay_exponent: float = 0.0
    r_squared: float = 0.0
    max_distance: int = 0

    @property
    def in_typical_range(self) -> bool:
        """Whether the exponent lies in the usual Hi-C range [-1.5, -0.8]."""
        low, high = TYPICAL_EXPONENT_RANGE
        return low <= self.decay_exponent <= high


def compute_contact_decay(
    matrix: Any,
    size: int,
    ranges: Sequence[ContigRange],
    max_distance: Optional[int] = None,
    min_count_for_fit: int = 10,
) -> ContactDecayResult:
    """
    Compute the P(s) curve and fit its decay exponent.

    Args:
        matrix: Contact matrix (flat or 2-D)
        size: Matrix dimension
        ranges: Contig ranges; only intra-contig pairs contribute
        max_distance: Largest distance (default min(size // 2, 500))
        min_count_for_fit: Reserved; distances are not filtered by count

    Returns:
        ContactDecayResult
    """
    if max_distance is None:
        max_distance = min(size // 2, DEFAULT_MAX_DISTANCE_CAP)

    if size == 0 or len(ranges) == 0:
        return ContactDecayResult(max_distance=max_distance)

    profile = compute_profile(matrix, size, ranges, max_distance)
    distances = np.nonzero(profile[1:] > 0)[0] + 1
    mean_contacts = profile[distances]

    log_distances = np.log10(distances.astype(np.float64))
    log_contacts = np.log10(mean_contacts)

    slope, r_squared = 0.0, 0.0
    if distances.size >= 2 and np.ptp(log_distances) > 0:
        fit = stats.linregress(log_distances, log_contacts)
        slope = float(fit.slope)
        r_squared = float(fit.rvalue ** 2)

    logger.debug(
        f"P(s) fit over {distances.size} distances: exponent={slope:.3f}, "
        f"R^2={r_squared:.3f}"
    )
    return ContactDecayResult(
        distances=distances.astype(np.float64),
        mean_contacts=mean_contacts,
        log_distances=log_distances,
        log_contacts=log_contacts,
        decay_exponent=slope,
        r_squared=r_squared,
        max_distance=max_distance,
    )


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
