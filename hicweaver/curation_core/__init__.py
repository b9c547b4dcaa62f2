#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Curation core: contig ordering and breakpoint detection from Hi-C signal.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .data_structures import (
    Breakpoint,
    BreakpointsByContig,
    Chain,
    ChainEntry,
    ContigLink,
    ContigRange,
    ContigSpan,
    CutParams,
    CutResult,
    ORIENTATIONS,
    Orientation,
    SortParams,
    SortResult,
    as_contact_matrix,
)
from .diagonal_profile import compute_profile
from .link_scorer import compute_candidate_links, score_link, score_orientations
from .chain_assembler import ChainGraph, assemble_chains, merge_chains, select_links
from .breakpoint_detector import (
    compute_junction_signal,
    detect_breakpoints,
    detect_contig_breakpoints,
)
from .curation_engine import build_contig_ranges, cut_contigs, sort_contigs

__all__ = [
    # Data structures
    "Breakpoint",
    "BreakpointsByContig",
    "Chain",
    "ChainEntry",
    "ContigLink",
    "ContigRange",
    "ContigSpan",
    "CutParams",
    "CutResult",
    "ORIENTATIONS",
    "Orientation",
    "SortParams",
    "SortResult",
    "as_contact_matrix",
    # Components
    "compute_profile",
    "score_link",
    "score_orientations",
    "compute_candidate_links",
    "ChainGraph",
    "select_links",
    "assemble_chains",
    "merge_chains",
    "compute_junction_signal",
    "detect_breakpoints",
    "detect_contig_breakpoints",
    # Orchestrators
    "build_contig_ranges",
    "sort_contigs",
    "cut_contigs",
]

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
