#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Curation engine: sort and cut orchestrators over the curation core.

Both entry points are pure functions of their inputs. They never touch the
caller's matrix or contig list; applying the result (reordering, inverting,
splitting contigs) is left to the caller.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import math
from typing import Any, List, Sequence

from .breakpoint_detector import detect_contig_breakpoints
from .chain_assembler import assemble_chains
from .data_structures import (
    Breakpoint,
    BreakpointsByContig,
    ChainEntry,
    ContigRange,
    CutParams,
    CutResult,
    ParamsLike,
    SortParams,
    SortResult,
    as_contact_matrix,
    resolve_params,
    span_length,
)
from .diagonal_profile import compute_profile
from .link_scorer import compute_candidate_links

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_contig_ranges(
    contigs: Sequence[Any],
    contig_order: Sequence[int],
    overview_size: int,
    full_resolution_size: int,
) -> List[ContigRange]:
    """
    Map contigs in display order to ranges in overview coordinates.

    Args:
        contigs: Contig geometry indexed by contig id (ContigSpan, objects with
            pixel_start/pixel_end, or (start, end) pairs)
        contig_order: Contig ids in display order
        overview_size: Dimension of the analysed matrix
        full_resolution_size: Total span of all contigs in full-resolution pixels

    Returns:
        One ContigRange per display position. Ranges that round to zero
        length are kept.
    """
    scale = overview_size / full_resolution_size if full_resolution_size > 0 else 1.0

    ranges: List[ContigRange] = []
    accumulated = 0
    for order_index, contig_id in enumerate(contig_order):
        start = _round_half_up(accumulated * scale)
        accumulated += span_length(contigs[contig_id])
        end = _round_half_up(accumulated * scale)
        ranges.append(ContigRange(start=start, end=end, order_index=order_index))
    return ranges


# ============================================================================
#                         SORT
# ============================================================================

def sort_contigs(
    matrix: Any,
    overview_size: int,
    contigs: Sequence[Any],
    contig_order: Sequence[int],
    full_resolution_size: int,
    params: ParamsLike = None,
) -> SortResult:
    """
    Infer chains of ordered, oriented contigs from the contact signal.

    Args:
        matrix: Contact matrix (flat row-major buffer or 2-D array)
        overview_size: Matrix dimension
        contigs: Contig geometry indexed by contig id
        contig_order: Contig ids in display order
        full_resolution_size: Total contig span in full-resolution pixels
        params: SortParams, a dict of the same keys, or None for defaults

    Returns:
        SortResult whose chains reference display positions (order indices)
    """
    params = resolve_params(params, SortParams)
    n = len(contig_order)

    if n < 2:
        logger.info(f"Sort: {n} contig(s), nothing to order")
        return SortResult(
            chains=[[ChainEntry(i, False)] for i in range(n)],
            links=[],
            threshold=params.hard_threshold,
        )

    m = as_contact_matrix(matrix, overview_size)
    ranges = build_contig_ranges(contigs, contig_order, overview_size, full_resolution_size)

    profile = compute_profile(m, m.shape[0], ranges, params.max_diagonal_distance)
    logger.info(
        f"Sort: profile computed over {n} contigs "
        f"(max distance {params.max_diagonal_distance})"
    )

    links = compute_candidate_links(
        m, m.shape[0], ranges, profile,
        params.max_diagonal_distance, params.signal_cutoff,
    )
    logger.info(f"Sort: {len(links)} candidate links above cutoff {params.signal_cutoff}")

    chains = assemble_chains(links, n, params.hard_threshold)

    return SortResult(
        chains=chains,
        links=sorted(links, key=lambda link: link.score, reverse=True),
        threshold=params.hard_threshold,
    )


# ============================================================================
#                         CUT
# ============================================================================

def cut_contigs(
    matrix: Any,
    overview_size: int,
    contigs: Sequence[Any],
    contig_order: Sequence[int],
    full_resolution_size: int,
    params: ParamsLike = None,
) -> CutResult:
    """
    Detect probable chimeric joins inside contigs.

    Offsets are found in overview pixels and reported in each contig's own
    full-resolution pixel coordinates.

    Args:
        matrix: Contact matrix (flat row-major buffer or 2-D array)
        overview_size: Matrix dimension
        contigs: Contig geometry indexed by contig id
        contig_order: Contig ids in display order
        full_resolution_size: Total contig span in full-resolution pixels
        params: CutParams, a dict of the same keys, or None for defaults

    Returns:
        CutResult keyed by order index; contigs without breakpoints are absent.
        Zero or one contig gives an empty mapping.
    """
    params = resolve_params(params, CutParams)
    if len(contig_order) < 2:
        logger.info(f"Cut: {len(contig_order)} contig(s), nothing to scan")
        return CutResult(breakpoints={}, total_breakpoints=0)

    m = as_contact_matrix(matrix, overview_size)
    ranges = build_contig_ranges(contigs, contig_order, overview_size, full_resolution_size)
    profile = compute_profile(m, m.shape[0], ranges, params.window_size)

    breakpoints: BreakpointsByContig = {}
    total = 0
    for contig_range in ranges:
        found = detect_contig_breakpoints(m, m.shape[0], contig_range, profile, params)
        if not found:
            continue

        contig = contigs[contig_order[contig_range.order_index]]
        pixel_length = span_length(contig)
        scale = pixel_length / contig_range.length

        mapped = []
        for bp in found:
            offset = _round_half_up(bp.offset * scale)
            if 0 < offset < pixel_length:
                mapped.append(Breakpoint(offset=offset, confidence=bp.confidence))
        if mapped:
            breakpoints[contig_range.order_index] = mapped
            total += len(mapped)
            logger.debug(
                f"Contig {contig_range.order_index}: breakpoints at "
                f"{[bp.offset for bp in mapped]}"
            )

    logger.info(f"Cut: {total} breakpoints in {len(breakpoints)} of {len(ranges)} contigs")
    return CutResult(breakpoints=breakpoints, total_breakpoints=total)


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
