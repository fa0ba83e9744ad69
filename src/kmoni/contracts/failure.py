"""Failure type for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, so callers can tell decoder bugs apart from data problems.
"""


class ContractViolation(RuntimeError):
    """Raised when a decoding stage contract is violated.

    This indicates a bug in calling code or pipeline logic, not bad station
    data. A malformed registry line or an out-of-bounds station pixel is a
    data problem and is handled per record; a pixel grid with the wrong shape
    or a result list that lost entries is a contract violation.

    Key distinction:
    - ValidationError: config or record error (handled by Pydantic)
    - ContractViolation: pipeline bug (programmer error)
    - SampleFailure: recoverable per-station issue (caught in the decoder)
    """
    pass
