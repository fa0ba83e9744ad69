"""Decoding stage contracts: fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when a stage doesn't produce what it
promised.

Key principle:
- Pydantic validates config and record correctness
- Contracts validate pipeline correctness
- The decoder handles per-station edge cases
"""

from kmoni.contracts.failure import ContractViolation
from kmoni.contracts.base import require
from kmoni.contracts.grid import assert_pixel_grid
from kmoni.contracts.analysis import assert_analysis_output

__all__ = [
    "ContractViolation",
    "require",
    "assert_pixel_grid",
    "assert_analysis_output",
]
