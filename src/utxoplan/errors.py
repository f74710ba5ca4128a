"""
Exceptions raised while planning UTXO withdrawals.

Every failure is synchronous and terminal. Nothing here is retried
internally; retry policy belongs to the caller.
"""

from __future__ import annotations


class PlanningError(Exception):
    """Base class for all withdrawal planning failures."""

    pass


class InvalidAddress(PlanningError):
    """Address is malformed, has a bad checksum or an unrecognized prefix."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Invalid address {address!r}: {reason}")


class InvalidUtxo(PlanningError):
    """Raw UTXO cannot be normalized."""

    pass


class InvalidAmount(PlanningError):
    """Amount or output value is not a positive integer."""

    pass


class NoUtxosAvailable(PlanningError):
    """Candidate set is empty."""

    def __init__(self, message: str = "No UTXOs available for transaction"):
        super().__init__(message)


class InsufficientFunds(PlanningError):
    """Candidates cannot cover the amount plus fees."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient funds for requested amount and fees: "
            f"need {required}, have {available}"
        )


class InputLimitExceeded(PlanningError):
    """Covering the amount needs more inputs than allowed."""

    def __init__(self, max_inputs: int):
        self.max_inputs = max_inputs
        super().__init__(f"Exceeded maximum input count of {max_inputs}")


class ConfigurationError(PlanningError):
    """Bridge configuration cannot be used to build a plan."""

    pass
