"""
HiCWeaver v0.1.0

Input/output helpers for the command-line interface.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .curation_io import (
    ContigTable,
    CurationInputError,
    chains_to_order,
    load_contact_matrix,
    load_contig_table,
    write_breakpoints,
    write_chains,
)

__all__ = [
    "ContigTable",
    "CurationInputError",
    "chains_to_order",
    "load_contact_matrix",
    "load_contig_table",
    "write_breakpoints",
    "write_chains",
]
