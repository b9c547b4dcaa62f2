#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Chain assembler: degree-constrained union-find over contig links.

Every contig has two ends (head and tail) and each end may be claimed by at
most one neighbour, so every connected component is a simple path. The
structure is an arena of flat integer arrays:

    parent         union-find parent
    size           component size (union by size)
    parity         orientation flip relative to parent, composed by XOR
    head_neighbor  contig attached to the head end, or -1
    tail_neighbor  contig attached to the tail end, or -1

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .data_structures import Chain, ChainEntry, ContigLink, Orientation

logger = logging.getLogger(__name__)

NO_NEIGHBOR = -1


# ============================================================================
#                         UNION-FIND ARENA
# ============================================================================

class ChainGraph:
    """
    Union-find with per-end neighbour slots and orientation parity.
    """

    def __init__(self, n: int):
        n = max(0, int(n))
        self.n = n
        self.parent = np.arange(n, dtype=np.int64)
        self.size = np.ones(n, dtype=np.int64)
        self.parity = np.zeros(n, dtype=np.int8)
        self.head_neighbor = np.full(n, NO_NEIGHBOR, dtype=np.int64)
        self.tail_neighbor = np.full(n, NO_NEIGHBOR, dtype=np.int64)

    def find(self, node: int) -> Tuple[int, int]:
        """
        Return (root, parity of node relative to root), compressing the path.
        """
        path = []
        while self.parent[node] != node:
            path.append(node)
            node = int(self.parent[node])
        root = node

        # Walk back from the node nearest the root, accumulating parity
        acc = 0
        for member in reversed(path):
            acc ^= int(self.parity[member])
            self.parity[member] = acc
            self.parent[member] = root
        return root, (int(self.parity[path[0]]) if path else 0)

    def connected(self, a: int, b: int) -> bool:
        return self.find(a)[0] == self.find(b)[0]

    def slot_free(self, node: int, tail: bool) -> bool:
        slots = self.tail_neighbor if tail else self.head_neighbor
        return slots[node] == NO_NEIGHBOR

    def union(self, a: int, b: int, flip: int) -> None:
        """
        Merge the components of a and b so that orient(a) XOR orient(b) == flip.
        """
        root_a, par_a = self.find(a)
        root_b, par_b = self.find(b)
        if root_a == root_b:
            return
        if self.size[root_a] < self.size[root_b]:
            root_a, root_b = root_b, root_a
            par_a, par_b = par_b, par_a
        self.parent[root_b] = root_a
        self.parity[root_b] = par_a ^ par_b ^ flip
        self.size[root_a] += self.size[root_b]

    def try_link(self, i: int, j: int, orientation: Orientation) -> bool:
        """
        Attempt to join contig i to contig j in the given orientation.

        Returns:
            True if the link was accepted, False if it would create a cycle,
            reuse an already claimed end, or references an invalid contig.
        """
        if i == j or not (0 <= i < self.n) or not (0 <= j < self.n):
            return False

        inverted_i, inverted_j = orientation.flags
        # Forward i exposes its tail to j; forward j exposes its head to i
        i_uses_tail = not inverted_i
        j_uses_tail = inverted_j

        if self.connected(i, j):
            return False
        if not self.slot_free(i, i_uses_tail) or not self.slot_free(j, j_uses_tail):
            return False

        (self.tail_neighbor if i_uses_tail else self.head_neighbor)[i] = j
        (self.tail_neighbor if j_uses_tail else self.head_neighbor)[j] = i
        self.union(i, j, int(inverted_i) ^ int(inverted_j))
        return True

    def degree(self, node: int) -> int:
        return int(self.head_neighbor[node] != NO_NEIGHBOR) + \
            int(self.tail_neighbor[node] != NO_NEIGHBOR)

    def chains(self) -> List[Chain]:
        """
        Walk every component from an endpoint and emit oriented chains.

        Each path is read starting from the endpoint with the smaller index.
        Chains are sorted by length descending, stable on the first entry's
        index.
        """
        components: Dict[int, List[int]] = {}
        for node in range(self.n):
            root, _ = self.find(node)
            components.setdefault(root, []).append(node)

        result: List[Chain] = []
        for members in components.values():
            if len(members) == 1:
                result.append([ChainEntry(members[0], False)])
                continue
            endpoints = [m for m in members if self.degree(m) <= 1]
            start = min(endpoints)
            result.append(self._walk(start))

        result.sort(key=lambda chain: chain[0].order_index)
        result.sort(key=len, reverse=True)
        return result

    def _walk(self, start: int) -> Chain:
        # The start endpoint faces the rest of the chain through its claimed
        # end: a claimed tail means it is read forward.
        start_inverted = self.tail_neighbor[start] == NO_NEIGHBOR
        _, start_parity = self.find(start)
        correction = int(start_inverted) ^ start_parity

        chain: Chain = []
        previous = NO_NEIGHBOR
        node = start
        while node != NO_NEIGHBOR and len(chain) < self.n:
            _, node_parity = self.find(node)
            inverted = bool(node_parity ^ correction)
            chain.append(ChainEntry(node, inverted))
            following = int(self.head_neighbor[node] if inverted else self.tail_neighbor[node])
            if following == previous:
                break
            previous, node = node, following
        return chain


# ============================================================================
#                         ASSEMBLY
# ============================================================================

def _ranked_links(links: Iterable[ContigLink], hard_threshold: float) -> List[ContigLink]:
    # Scores live in [0, 1]; a bar of 1 or more admits nothing
    if hard_threshold >= 1.0:
        return []
    survivors = [link for link in links if link.score >= hard_threshold]
    # sorted() is stable, so ties keep input order
    return sorted(survivors, key=lambda link: link.score, reverse=True)


def select_links(
    links: Sequence[ContigLink],
    n: int,
    hard_threshold: float,
) -> Tuple[ChainGraph, List[ContigLink]]:
    """
    Greedily accept links in descending score order.

    Args:
        links: Candidate links (any order)
        n: Number of contigs
        hard_threshold: Links scoring below this are discarded; 1 or more
            rejects every link

    Returns:
        (ChainGraph holding the accepted adjacencies, accepted links in
        acceptance order)
    """
    graph = ChainGraph(n)
    accepted: List[ContigLink] = []
    for link in _ranked_links(links, hard_threshold):
        if graph.try_link(int(link.i), int(link.j), Orientation(link.orientation)):
            accepted.append(link)
            logger.debug(
                f"Accepted link {link.i}-{link.j} ({Orientation(link.orientation).value}, "
                f"score={link.score:.3f})"
            )
    return graph, accepted


def assemble_chains(
    links: Sequence[ContigLink],
    n: int,
    hard_threshold: float,
) -> List[Chain]:
    """
    Assemble contigs into linear, oriented chains from scored links.

    Args:
        links: Candidate links between contigs (indices in [0, n))
        n: Number of contigs
        hard_threshold: Acceptance bar for merging

    Returns:
        Chains sorted largest-first; together they contain every index in
        [0, n) exactly once.
    """
    graph, accepted = select_links(links, n, hard_threshold)
    chains = graph.chains()
    logger.info(
        f"Chain assembly: {len(accepted)}/{len(links)} links accepted, "
        f"{len(chains)} chains from {n} contigs"
    )
    return chains


# ============================================================================
#                         HIERARCHICAL MERGE
# ============================================================================

def _reverse_chain(chain: Chain) -> Chain:
    return [ChainEntry(e.order_index, not e.inverted) for e in reversed(chain)]


def _intra_chain_score(members: set, links: Sequence[ContigLink]) -> float:
    scores = [link.score for link in links if link.i in members and link.j in members]
    return sum(scores) / len(scores) if scores else 0.0


def _join_oriented(chain_i: Chain, chain_j: Chain, link: ContigLink) -> Optional[Chain]:
    """
    Concatenate chain_i and chain_j so that link.i meets link.j with the
    link's orientation. Returns None when either contig is not at a chain end.
    """
    inverted_i, inverted_j = Orientation(link.orientation).flags

    pos_i = next(k for k, e in enumerate(chain_i) if e.order_index == link.i)
    pos_j = next(k for k, e in enumerate(chain_j) if e.order_index == link.j)
    if pos_i not in (0, len(chain_i) - 1) or pos_j not in (0, len(chain_j) - 1):
        return None

    # i must end chain_i, j must start chain_j
    if pos_i != len(chain_i) - 1:
        chain_i = _reverse_chain(chain_i)
    if pos_j != 0:
        chain_j = _reverse_chain(chain_j)

    # The end of i facing j must be free; only a singleton can turn around
    if chain_i[-1].inverted != inverted_i:
        if len(chain_i) > 1:
            return None
        chain_i = _reverse_chain(chain_i)
    if chain_j[0].inverted != inverted_j:
        if len(chain_j) > 1:
            return None
        chain_j = _reverse_chain(chain_j)
    return chain_i + chain_j


def merge_chains(
    chains: Sequence[Chain],
    links: Sequence[ContigLink],
    merge_threshold: float = 0.05,
    base_threshold: float = 0.0,
) -> List[Chain]:
    """
    Agglomeratively merge chains connected by strong cross-chain links.

    Repeatedly merges the chain pair with the highest cross-chain link score,
    as long as it reaches max(merge_threshold, 0.3 * base_threshold). Two
    multi-contig chains are not merged when their best cross link is below
    half of either chain's mean intra-chain link score.

    Args:
        chains: Chains from assemble_chains
        links: Candidate links used for scoring
        merge_threshold: Floor for the merge bar
        base_threshold: Threshold used for the initial assembly

    Returns:
        New list of chains, largest first.
    """
    effective = max(merge_threshold, base_threshold * 0.3)
    working: List[Chain] = [list(c) for c in chains if c]
    merges = 0

    while True:
        index = {e.order_index: ci for ci, chain in enumerate(working) for e in chain}

        pair_best: Dict[Tuple[int, int], Tuple[float, ContigLink]] = {}
        for link in links:
            ci, cj = index.get(link.i), index.get(link.j)
            if ci is None or cj is None or ci == cj:
                continue
            key = (min(ci, cj), max(ci, cj))
            if key not in pair_best or link.score > pair_best[key][0]:
                pair_best[key] = (link.score, link)

        best = None
        for key, (score, link) in pair_best.items():
            if score < effective:
                continue
            chain_a, chain_b = working[key[0]], working[key[1]]
            if len(chain_a) >= 2 and len(chain_b) >= 2:
                intra_a = _intra_chain_score({e.order_index for e in chain_a}, links)
                intra_b = _intra_chain_score({e.order_index for e in chain_b}, links)
                min_intra = min(intra_a, intra_b)
                if min_intra > 0 and score < 0.5 * min_intra:
                    continue
            if best is None or score > best[1]:
                best = (key, score, link)

        if best is None:
            break

        (a, b), _, link = best
        chain_i = working[index[link.i]]
        chain_j = working[index[link.j]]
        merged = _join_oriented(chain_i, chain_j, link)
        if merged is None:
            keep, absorb = (a, b) if len(working[a]) >= len(working[b]) else (b, a)
            merged = working[keep] + working[absorb]

        working = [c for k, c in enumerate(working) if k not in (a, b)]
        working.append(merged)
        merges += 1

    working.sort(key=lambda chain: chain[0].order_index)
    working.sort(key=len, reverse=True)
    logger.info(f"Hierarchical merge: {merges} merges, {len(working)} chains")
    return working


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
