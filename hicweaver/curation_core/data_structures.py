#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Data structures shared by the curation core.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
#                         GEOMETRY
# ============================================================================

@dataclass(frozen=True)
class ContigRange:
    """
    Half-open pixel interval [start, end) of one contig in matrix coordinates.

    Attributes:
        start: First pixel of the contig
        end: One past the last pixel of the contig
        order_index: Position of the contig in the current display order
    """
    start: int
    end: int
    order_index: int

    @property
    def length(self) -> int:
        """Number of pixels covered (0 for degenerate ranges)."""
        return max(0, self.end - self.start)


@dataclass(frozen=True)
class ContigSpan:
    """
    Caller-side geometry of one contig in full-resolution pixel coordinates.

    Attributes:
        pixel_start: First full-resolution pixel of the contig
        pixel_end: One past the last full-resolution pixel
        name: Optional contig name (reporting only)
    """
    pixel_start: int
    pixel_end: int
    name: Optional[str] = None

    def __post_init__(self):
        if self.pixel_end < self.pixel_start:
            logger.warning(
                f"Contig {self.name or '?'}: pixel_end {self.pixel_end} < "
                f"pixel_start {self.pixel_start}"
            )

    @property
    def pixel_length(self) -> int:
        return self.pixel_end - self.pixel_start


def span_length(contig: Any) -> int:
    """
    Full-resolution pixel length of a contig description.

    Accepts ContigSpan, any object exposing pixel_start/pixel_end,
    or a (start, end) pair.
    """
    if hasattr(contig, 'pixel_start') and hasattr(contig, 'pixel_end'):
        return int(contig.pixel_end) - int(contig.pixel_start)
    start, end = contig[0], contig[1]
    return int(end) - int(start)


# ============================================================================
#                         LINKS AND CHAINS
# ============================================================================

class Orientation(str, Enum):
    """
    Relative orientation of a contig pair.

    The first letter describes contig A, the second contig B: H means the
    contig is read forward, T means it is reversed. HH therefore joins the
    tail of A to the head of B.
    """
    HH = "HH"
    HT = "HT"
    TH = "TH"
    TT = "TT"

    @property
    def flags(self) -> Tuple[bool, bool]:
        """(inverted_a, inverted_b) for this orientation."""
        return (self.value[0] == "T", self.value[1] == "T")

    @classmethod
    def from_flags(cls, inverted_a: bool, inverted_b: bool) -> "Orientation":
        return cls(("T" if inverted_a else "H") + ("T" if inverted_b else "H"))


# Order used for ContigLink.all_scores
ORIENTATIONS: Tuple[Orientation, ...] = (
    Orientation.HH, Orientation.HT, Orientation.TH, Orientation.TT
)


@dataclass
class ContigLink:
    """
    Candidate adjacency between two contigs.

    Attributes:
        i: Order index of the first contig
        j: Order index of the second contig
        score: Best score across the four orientations
        orientation: Orientation achieving the best score
        all_scores: Scores for [HH, HT, TH, TT]
    """
    i: int
    j: int
    score: float
    orientation: Orientation = Orientation.HH
    all_scores: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ChainEntry:
    """Placement of one contig within an assembled chain."""
    order_index: int
    inverted: bool = False


Chain = List[ChainEntry]


# ============================================================================
#                         BREAKPOINTS
# ============================================================================

@dataclass(frozen=True)
class Breakpoint:
    """
    Candidate split point inside one contig.

    Attributes:
        offset: Pixel offset local to the contig (0 < offset < length)
        confidence: Relative signal drop at the junction (0.0-1.0)
    """
    offset: int
    confidence: float


BreakpointsByContig = Dict[int, List[Breakpoint]]


# ============================================================================
#                         PARAMETERS AND RESULTS
# ============================================================================

@dataclass
class SortParams:
    """Tunable knobs for sort_contigs."""
    max_diagonal_distance: int = 20  # Sampling window for profile and link scoring
    signal_cutoff: float = 0.01  # Cheap pre-filter on best link score
    hard_threshold: float = 0.8  # Acceptance bar for merging


@dataclass
class CutParams:
    """Tunable knobs for cut_contigs."""
    cut_threshold: float = 0.30  # Relative drop below local baseline
    window_size: int = 8  # Max diagonal distance sampled around an offset
    min_fragment_size: int = 16  # Smallest fragment a cut may leave (overview px)
    min_confidence: float = 0.5  # Breakpoints at or below this are dropped


ParamsLike = Union[SortParams, CutParams, Mapping[str, Any], None]


def resolve_params(params: ParamsLike, params_cls):
    """
    Build a parameter dataclass from an instance, a mapping, or None.

    Unknown mapping keys are ignored; values are not validated.
    """
    if params is None:
        return params_cls()
    if isinstance(params, params_cls):
        return params
    known = {f.name for f in fields(params_cls)}
    if isinstance(params, Mapping):
        return params_cls(**{k: v for k, v in params.items() if k in known})
    return params_cls(**{k: getattr(params, k) for k in known if hasattr(params, k)})


@dataclass
class SortResult:
    """Output of sort_contigs."""
    chains: List[Chain] = field(default_factory=list)
    links: List[ContigLink] = field(default_factory=list)
    threshold: float = 0.0


@dataclass
class CutResult:
    """Output of cut_contigs."""
    breakpoints: BreakpointsByContig = field(default_factory=dict)
    total_breakpoints: int = 0


# ============================================================================
#                         MATRIX ACCESS
# ============================================================================

def as_contact_matrix(matrix: Any, size: int) -> np.ndarray:
    """
    Return a read-only (size x size) view of a contact matrix.

    Args:
        matrix: Flat row-major buffer of size*size values, or a 2-D array
        size: Matrix dimension

    Returns:
        2-D numpy array sharing memory with the input where possible.
        The caller's buffer is never modified.
    """
    size = max(0, int(size))
    arr = np.asarray(matrix)
    if arr.ndim != 2:
        arr = arr.reshape(-1)
        if arr.size < size * size:
            # Short buffers are treated as if the missing tail were absent
            size = int(np.sqrt(arr.size))
        arr = arr[:size * size].reshape(size, size)
    else:
        size = min(size, arr.shape[0], arr.shape[1])
        arr = arr[:size, :size]
    view = arr.view()
    view.flags.writeable = False
    return view


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
