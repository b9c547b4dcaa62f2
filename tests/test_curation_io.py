#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Tests for matrix and contig table loading and report writing.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import numpy as np
import pytest

from hicweaver.curation_core import Breakpoint, ChainEntry, CutResult
from hicweaver.io_utils import (
    CurationInputError,
    chains_to_order,
    load_contact_matrix,
    load_contig_table,
    write_breakpoints,
    write_chains,
)


def _write(path, text):
    path.write_text(text)
    return path


# ---------------------------------------------------------------------------
# Contig table
# ---------------------------------------------------------------------------

class TestLoadContigTable:
    """Test TSV contig table parsing."""

    def test_row_order(self, temp_output_dir):
        """Without an order column, rows are the display order."""
        path = _write(temp_output_dir / "contigs.tsv",
                      "name\tpixel_start\tpixel_end\n"
                      "ctg1\t0\t1200\n"
                      "ctg2\t1200\t2000\n")

        table = load_contig_table(path)

        assert len(table) == 2
        assert table.names == ["ctg1", "ctg2"]
        assert table.order == [0, 1]
        assert table.contigs[1].pixel_length == 800
        assert table.full_resolution_size == 2000

    def test_order_column(self, temp_output_dir):
        """The order column gives each contig's display position."""
        path = _write(temp_output_dir / "contigs.tsv",
                      "name\tpixel_start\tpixel_end\torder\n"
                      "a\t0\t10\t2\n"
                      "b\t10\t20\t0\n"
                      "c\t20\t30\t1\n")

        table = load_contig_table(path)

        assert table.order == [1, 2, 0]

    def test_comments_and_blank_lines(self, temp_output_dir):
        path = _write(temp_output_dir / "contigs.tsv",
                      "# exported from a curation session\n"
                      "\n"
                      "name\tpixel_start\tpixel_end\n"
                      "# first scaffold\n"
                      "ctg1\t0\t5\n"
                      "\n")

        assert load_contig_table(path).names == ["ctg1"]

    def test_column_order_free(self, temp_output_dir):
        """Columns are found by header name."""
        path = _write(temp_output_dir / "contigs.tsv",
                      "pixel_end\tname\tpixel_start\n"
                      "40\tctgA\t10\n")

        contig = load_contig_table(path).contigs[0]

        assert (contig.pixel_start, contig.pixel_end, contig.name) == (10, 40, "ctgA")

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(CurationInputError, match="not found"):
            load_contig_table(temp_output_dir / "absent.tsv")

    def test_empty_file(self, temp_output_dir):
        path = _write(temp_output_dir / "empty.tsv", "# nothing\n")
        with pytest.raises(CurationInputError, match="empty"):
            load_contig_table(path)

    def test_missing_header_column(self, temp_output_dir):
        path = _write(temp_output_dir / "bad.tsv", "name\tpixel_start\nctg\t0\n")
        with pytest.raises(CurationInputError, match="pixel_end"):
            load_contig_table(path)

    def test_short_row(self, temp_output_dir):
        path = _write(temp_output_dir / "bad.tsv",
                      "name\tpixel_start\tpixel_end\nctg\t0\n")
        with pytest.raises(CurationInputError, match="expected 3 columns"):
            load_contig_table(path)

    def test_non_integer(self, temp_output_dir):
        path = _write(temp_output_dir / "bad.tsv",
                      "name\tpixel_start\tpixel_end\nctg\t0\tten\n")
        with pytest.raises(CurationInputError, match="must be an integer"):
            load_contig_table(path)

    def test_reversed_span(self, temp_output_dir):
        path = _write(temp_output_dir / "bad.tsv",
                      "name\tpixel_start\tpixel_end\nctg\t50\t10\n")
        with pytest.raises(CurationInputError, match="before pixel_start"):
            load_contig_table(path)

    def test_order_not_permutation(self, temp_output_dir):
        path = _write(temp_output_dir / "bad.tsv",
                      "name\tpixel_start\tpixel_end\torder\n"
                      "a\t0\t10\t0\n"
                      "b\t10\t20\t0\n")
        with pytest.raises(CurationInputError, match="permutation"):
            load_contig_table(path)

    def test_error_is_value_error(self, temp_output_dir):
        """Callers catching ValueError also see input errors."""
        with pytest.raises(ValueError):
            load_contig_table(temp_output_dir / "absent.tsv")


# ---------------------------------------------------------------------------
# Contact matrix
# ---------------------------------------------------------------------------

class TestLoadContactMatrix:
    """Test matrix loading from .npy, .npz and text."""

    def test_npy(self, temp_output_dir):
        path = temp_output_dir / "map.npy"
        np.save(path, np.eye(4, dtype=np.float64))

        matrix = load_contact_matrix(path)

        assert matrix.shape == (4, 4)
        assert matrix.dtype == np.float32
        assert matrix[2, 2] == 1.0

    def test_npz_named_key(self, temp_output_dir):
        path = temp_output_dir / "map.npz"
        np.savez(path, other=np.zeros((2, 2)), contact_map=np.ones((3, 3)))

        assert load_contact_matrix(path).shape == (3, 3)

    def test_npz_first_array(self, temp_output_dir):
        path = temp_output_dir / "map.npz"
        np.savez(path, np.full((5, 5), 2.0))

        matrix = load_contact_matrix(path)

        assert matrix.shape == (5, 5)
        assert np.all(matrix == 2.0)

    def test_text(self, temp_output_dir):
        path = _write(temp_output_dir / "map.txt", "0 1 2\n1 0 3\n2 3 0\n")

        matrix = load_contact_matrix(path)

        assert matrix.shape == (3, 3)
        assert matrix[1, 2] == 3.0

    def test_single_value_text(self, temp_output_dir):
        path = _write(temp_output_dir / "map.txt", "7\n")
        assert load_contact_matrix(path).shape == (1, 1)

    def test_non_square(self, temp_output_dir):
        path = temp_output_dir / "map.npy"
        np.save(path, np.zeros((3, 4)))
        with pytest.raises(CurationInputError, match="square"):
            load_contact_matrix(path)

    def test_one_dimensional(self, temp_output_dir):
        path = temp_output_dir / "map.npy"
        np.save(path, np.zeros(9))
        with pytest.raises(CurationInputError, match="square"):
            load_contact_matrix(path)

    def test_unparseable_text(self, temp_output_dir):
        path = _write(temp_output_dir / "map.txt", "a b\nc d\n")
        with pytest.raises(CurationInputError, match="Could not read"):
            load_contact_matrix(path)

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(CurationInputError, match="not found"):
            load_contact_matrix(temp_output_dir / "absent.npy")


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class TestReports:
    """Test chain and breakpoint writers."""

    def test_chains_to_order(self):
        """Order indices are mapped back to contig ids."""
        chains = [
            [ChainEntry(1), ChainEntry(3, True)],
            [ChainEntry(0)],
            [ChainEntry(2)],
        ]

        assert chains_to_order(chains, [2, 0, 3, 1]) == [
            (0, False), (1, True), (2, False), (3, False)
        ]

    def test_write_chains(self, temp_output_dir):
        chains = [[ChainEntry(1), ChainEntry(0, True)]]
        path = temp_output_dir / "chains.tsv"

        write_chains(chains, [1, 0], ["ctgA", "ctgB"], path)

        lines = path.read_text().splitlines()
        assert lines[0] == "chain\tposition\torder_index\tcontig\tinverted"
        assert lines[1] == "0\t0\t1\tctgA\tfalse"
        assert lines[2] == "0\t1\t0\tctgB\ttrue"

    def test_write_breakpoints(self, temp_output_dir):
        result = CutResult(
            breakpoints={
                2: [Breakpoint(offset=40, confidence=0.75)],
                0: [Breakpoint(offset=7, confidence=1.0), Breakpoint(offset=90, confidence=0.5)],
            },
            total_breakpoints=3,
        )
        path = temp_output_dir / "breakpoints.tsv"

        write_breakpoints(result, [2, 0, 1], ["a", "b", "c"], path)

        lines = path.read_text().splitlines()
        assert lines == [
            "order_index\tcontig\toffset\tconfidence",
            "0\tc\t7\t1.0000",
            "0\tc\t90\t0.5000",
            "2\tb\t40\t0.7500",
        ]

    def test_write_no_breakpoints(self, temp_output_dir):
        path = temp_output_dir / "breakpoints.tsv"
        write_breakpoints(CutResult(), [0], ["a"], path)
        assert path.read_text() == "order_index\tcontig\toffset\tconfidence\n"

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
