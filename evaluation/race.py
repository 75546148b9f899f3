"""
Evaluation Race Controller
File: race.py

Purpose: Turn a confirmed request id into exactly one terminal state.

Two tasks run concurrently per evaluation:
- the poll arm reads the ledger until a record with scores appears, then
  fetches and parses the justification (-> fulfilled)
- the timeout arm sleeps through the contract's response window and, unless
  the poll arm has already found the record, submits the one-shot finalize
  transaction (-> timed-out)

The only state shared by the arms is the `terminal` event. Checking it and
marking the finalize as started happen with no suspension point in between.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from core.config import RuntimeConfig
from core.schemas.errors import EvaluationPollTimeoutError, TimeoutFinalizeError
from core.schemas.evaluation import (
    EvaluationOutcome,
    EvaluationRecord,
    EvaluationRequest,
    EvaluationResult,
    EvaluationStatus,
)

from evaluation.fetcher import RetryingFetcher
from evaluation.justification import LOADING_ERROR_PREFIX, JustificationLoader
from evaluation.ledger import EvaluationLedger, is_benign_finalize_revert
from evaluation.result_parser import ResultParser

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

UNREADABLE_RECORD_TEXT = (
    "The request was answered on-chain but its evaluation record could not be read."
)


class _TimerVerdict(str, Enum):
    TIMED_OUT = "timed-out"
    ANSWERED = "answered"
    INERT = "inert"


@dataclass
class _RaceState:
    terminal: asyncio.Event = field(default_factory=asyncio.Event)
    finalizing: bool = False


def _consume_discarded(task: asyncio.Task) -> None:
    """Done-callback for a losing arm left to finish on its own."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Discarded outcome of losing arm %s: %s", task.get_name(), exc)


class EvaluationRaceController:
    """
    Races result polling against the on-chain timeout finalizer.

    Usage:
        controller = EvaluationRaceController(ledger, fetcher)
        outcome = await controller.wait_for_fulfil_or_timeout(request)
        if outcome.fulfilled:
            render(outcome.result)
    """

    def __init__(
        self,
        ledger: EvaluationLedger,
        fetcher: RetryingFetcher,
        parser: ResultParser | None = None,
        *,
        poll_interval: float = 5.0,
        max_poll_attempts: int = 60,
        response_timeout_seconds: float = 300,
        safety_margin_ms: float = 15_000,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.ledger = ledger
        self.fetcher = fetcher
        self.parser = parser or ResultParser()
        self.loader = JustificationLoader(fetcher, self.parser)
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.response_timeout_seconds = response_timeout_seconds
        self.safety_margin_ms = safety_margin_ms
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        ledger: EvaluationLedger,
        fetcher: RetryingFetcher,
        config: RuntimeConfig,
        parser: ResultParser | None = None,
    ) -> "EvaluationRaceController":
        return cls(
            ledger,
            fetcher,
            parser,
            poll_interval=config.poll.interval_seconds,
            max_poll_attempts=config.poll.max_attempts,
            response_timeout_seconds=config.timeout.response_timeout_seconds,
            safety_margin_ms=config.timeout.safety_margin_ms,
        )

    @property
    def timeout_wait_seconds(self) -> float:
        return self.response_timeout_seconds + self.safety_margin_ms / 1000

    # -------------------------------------------------------------------------
    # Poll arm
    # -------------------------------------------------------------------------

    async def poll_for_record(self, request_id: str) -> EvaluationRecord:
        """
        Read the ledger until the record exists and carries scores.

        Errors from individual reads are logged and retried.

        Raises:
            EvaluationPollTimeoutError: the attempt budget ran out
        """
        for attempt in range(1, self.max_poll_attempts + 1):
            try:
                record = await self.ledger.get_evaluation(request_id)
                if not isinstance(record, EvaluationRecord):
                    record = EvaluationRecord.from_tuple(record)
                if record.is_ready:
                    logger.info("Evaluation for %s found after %d polls", request_id, attempt)
                    return record
            except Exception as e:
                logger.warning(
                    "Polling error for %s (attempt %d/%d): %s",
                    request_id, attempt, self.max_poll_attempts, e,
                )
            if attempt < self.max_poll_attempts:
                await self._sleep(self.poll_interval)

        raise EvaluationPollTimeoutError(request_id, self.max_poll_attempts)

    async def collect_result(self, record: EvaluationRecord) -> EvaluationResult:
        """
        Fetch and parse every justification page a record points to.

        A page that cannot be fetched yields an explanatory justification
        string; the ledger scores are kept whenever no page reports its own.
        """
        result = await self.loader.load(record.justification_cid)
        if not result.outcome_scores:
            result = result.model_copy(update={"outcome_scores": record.likelihoods})
        return result

    async def _poll_arm(
        self,
        request_id: str,
        state: _RaceState,
    ) -> tuple[EvaluationRecord, EvaluationResult]:
        record = await self.poll_for_record(request_id)
        state.terminal.set()
        result = await self.collect_result(record)
        return record, result

    # -------------------------------------------------------------------------
    # Timeout arm
    # -------------------------------------------------------------------------

    async def _timeout_arm(self, request_id: str, state: _RaceState) -> _TimerVerdict:
        await self._sleep(self.timeout_wait_seconds)

        if state.terminal.is_set():
            return _TimerVerdict.INERT
        state.finalizing = True

        logger.info("Response window elapsed for %s; triggering on-chain timeout", request_id)
        try:
            await self.ledger.finalize_evaluation_timeout(request_id)
        except Exception as e:
            if is_benign_finalize_revert(e):
                logger.info("Finalize for %s reverted as already answered: %s", request_id, e)
                return _TimerVerdict.ANSWERED
            raise TimeoutFinalizeError(request_id, e) from e

        state.terminal.set()
        return _TimerVerdict.TIMED_OUT

    # -------------------------------------------------------------------------
    # Race
    # -------------------------------------------------------------------------

    async def wait_for_fulfil_or_timeout(
        self,
        request: EvaluationRequest | str,
    ) -> EvaluationOutcome:
        """
        Drive both arms and return the first terminal outcome.

        A local poll give-up does not end the call. The outcome is left to the
        timeout arm, which fires `safety_margin_ms` after the response window,
        so a give-up can add up to that margin of latency.

        Raises:
            TimeoutFinalizeError: finalize failed for a genuine reason and
                polling has given up as well
            EvaluationPollTimeoutError: not raised while the timeout arm can
                still decide; kept as the cause of a finalize failure
        """
        request_id = request.request_id if isinstance(request, EvaluationRequest) else str(request)
        state = _RaceState()
        poll_task = asyncio.create_task(
            self._poll_arm(request_id, state), name=f"poll:{request_id}"
        )
        timer_task = asyncio.create_task(
            self._timeout_arm(request_id, state), name=f"timeout:{request_id}"
        )

        try:
            return await self._race(request_id, poll_task, timer_task)
        finally:
            for task in (poll_task, timer_task):
                if task.done():
                    continue
                if task is timer_task and state.finalizing:
                    # Already in flight; let it finish and drop the outcome
                    task.add_done_callback(_consume_discarded)
                else:
                    task.cancel()

    async def _race(
        self,
        request_id: str,
        poll_task: asyncio.Task,
        timer_task: asyncio.Task,
    ) -> EvaluationOutcome:
        pending: set[asyncio.Task] = {poll_task, timer_task}
        poll_error: EvaluationPollTimeoutError | None = None
        finalize_error: TimeoutFinalizeError | None = None
        answered = False

        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

            if poll_task in done:
                try:
                    record, result = poll_task.result()
                except EvaluationPollTimeoutError as e:
                    poll_error = e
                    logger.warning(
                        "Polling gave up on %s after %d attempts; waiting for timeout arm",
                        request_id, e.attempts,
                    )
                    if answered:
                        return await self._read_answered(request_id)
                    if finalize_error is not None:
                        raise finalize_error from e
                else:
                    return EvaluationOutcome(
                        status=EvaluationStatus.FULFILLED,
                        request_id=request_id,
                        justification_cid=record.justification_cid,
                        result=result,
                    )

            if timer_task in done:
                try:
                    verdict = timer_task.result()
                except TimeoutFinalizeError as e:
                    if poll_task.done():
                        raise
                    finalize_error = e
                    logger.error("%s; still waiting for polling", e)
                    continue

                if verdict is _TimerVerdict.TIMED_OUT:
                    return EvaluationOutcome(
                        status=EvaluationStatus.TIMED_OUT,
                        request_id=request_id,
                    )
                if verdict is _TimerVerdict.ANSWERED:
                    if poll_task.done():
                        return await self._read_answered(request_id)
                    answered = True
                # INERT, or ANSWERED while polling continues: the poll arm decides

        if finalize_error is not None:
            raise finalize_error
        raise poll_error

    async def _read_answered(self, request_id: str) -> EvaluationOutcome:
        """One last ledger read after the contract reported the request answered."""
        try:
            record = await self.ledger.get_evaluation(request_id)
            if not isinstance(record, EvaluationRecord):
                record = EvaluationRecord.from_tuple(record)
        except Exception as e:
            logger.warning("Final read for %s failed: %s", request_id, e)
            record = None

        if record is None or not record.is_ready:
            return EvaluationOutcome(
                status=EvaluationStatus.FULFILLED,
                request_id=request_id,
                result=EvaluationResult(justification_text=UNREADABLE_RECORD_TEXT),
            )
        return EvaluationOutcome(
            status=EvaluationStatus.FULFILLED,
            request_id=request_id,
            justification_cid=record.justification_cid,
            result=await self.collect_result(record),
        )


__all__ = [
    "EvaluationRaceController",
    "LOADING_ERROR_PREFIX",
    "UNREADABLE_RECORD_TEXT",
]
