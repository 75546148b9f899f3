"""
Evaluation Ledger Interface
File: ledger.py

Purpose: The on-chain aggregator contract as seen by the evaluation core.
Wallet handling, fees and ABI encoding live in the adapter implementing
this protocol.
"""

from __future__ import annotations

import re
from typing import Protocol, Sequence, runtime_checkable

from core.schemas.errors import TransactionRevertedError
from core.schemas.evaluation import EvaluationRecord

# Revert reasons the contract uses when the request was already answered
BENIGN_REVERT_PATTERN = re.compile(r"\b(?:complete|not timed[- ]out)\b", re.IGNORECASE)


@runtime_checkable
class EvaluationLedger(Protocol):
    """
    Capability handle for the evaluation contract.

    Implementations must tolerate concurrent use from the polling and
    timeout tasks of one race.
    """

    async def request_evaluation(self, cids: Sequence[str]) -> str:
        """Submit a request for `cids`, wait for confirmation, return the request id."""
        ...

    async def get_evaluation(self, request_id: str) -> EvaluationRecord:
        """Read the evaluation record for `request_id`."""
        ...

    async def finalize_evaluation_timeout(self, request_id: str) -> None:
        """
        Submit the one-shot timeout finalize transaction and wait for it.

        Raises TransactionRevertedError when the contract refuses it.
        """
        ...


def revert_reason(exc: BaseException | None) -> str | None:
    """
    Revert reason of a failed transaction, or None for any other failure.

    Adapters may wrap the revert; the cause chain is followed.
    """
    while exc is not None:
        if isinstance(exc, TransactionRevertedError):
            return exc.reason
        exc = exc.__cause__
    return None


def is_benign_finalize_revert(exc: BaseException) -> bool:
    """
    True when a finalize failure means the oracle already answered.

    Only contract reverts qualify. Transport and RPC errors are genuine
    failures whatever their message says.
    """
    reason = revert_reason(exc)
    if reason is None:
        return False
    return BENIGN_REVERT_PATTERN.search(reason) is not None


__all__ = [
    "BENIGN_REVERT_PATTERN",
    "EvaluationLedger",
    "is_benign_finalize_revert",
    "revert_reason",
]
