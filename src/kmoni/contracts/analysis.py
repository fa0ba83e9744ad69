"""Analysis stage contract.

Enforces that a decoding pass returns one finished result per input entry.
"""

from typing import Sequence, TYPE_CHECKING

from kmoni.contracts.base import require

if TYPE_CHECKING:
    from kmoni.image.analysis import AnalysisResult


def assert_analysis_output(results: Sequence["AnalysisResult"], expected_count: int) -> None:
    """Enforce analysis stage contract.

    We do NOT check whether intensities are plausible; that is the
    classifier's job. Only structural guarantees are checked.

    Parameters
    ----------
    results : sequence of AnalysisResult
        Output of ``parse_intensity_from_image``.

    expected_count : int
        Number of entries passed in.

    Raises
    ------
    ContractViolation
        If cardinality differs, a result is still pending, or a result has
        an intensity without a sampled color.
    """
    require(
        len(results) == expected_count,
        f"Analysis contract violated: got {len(results)} results, expected {expected_count}"
    )

    for result in results:
        require(
            result.is_terminal,
            f"Analysis contract violated: {result.point.code} left in state {result.status}"
        )
        require(
            result.intensity is None or result.color is not None,
            f"Analysis contract violated: {result.point.code} has intensity but no color"
        )
