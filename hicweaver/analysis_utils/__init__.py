"""
HiCWeaver v0.1.0

Analysis utilities built on the curation core.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .contact_decay import ContactDecayResult, compute_contact_decay

__all__ = ["ContactDecayResult", "compute_contact_decay"]
