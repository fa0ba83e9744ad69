"""Base contract enforcement utility.

The require() function is the single enforcement mechanism for all contracts.
"""

from kmoni.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a stage contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(grid.ndim == 3, "Pixel grid contract: expected (y, x, channel)")
    """
    if not condition:
        raise ContractViolation(message)
