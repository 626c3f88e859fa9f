"""Error recovery for pipeline stages.

The :class:`ErrorRecoveryManager` layers three independent capabilities
around any fallible coroutine factory:

- retry with exponential backoff, bounded by ``RetryConfig.max_retries``
- a deadline that abandons (but never cancels) the underlying work
- bounded per-task snapshot rings for rollback and step-level partial recovery

A manager holds process-local state (retry counters and snapshot rings), so
the orchestrator creates one per generation run and clears it once every
task of the run is terminal.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import time
from collections import deque
from typing import Any, Awaitable, Callable, Optional, TypeVar

from appforge.config import RecoveryConfig, RetryConfig
from appforge.models import ConfigurationError, GenerationState
from appforge.utils import print_debug, print_error

T = TypeVar("T")

ProgressCallback = Callable[[float, str], Any]
SleepFn = Callable[[float], Awaitable[Any]]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class RecoveryError(Exception):
    """Base class for failures surfaced by the recovery manager."""


class RetryExhaustedError(RecoveryError):
    """Every attempt of a retried unit of work failed."""

    def __init__(self, attempts: int, cause: BaseException | None) -> None:
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Generation failed after {attempts} retries: {cause}")


class GenerationTimeoutError(RecoveryError):
    """A unit of work did not finish before its deadline."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"Generation timeout after {seconds:g} seconds")


class PartialRecoveryError(RecoveryError):
    """A step of a partial recovery exhausted its retries."""

    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"Partial recovery failed at step {step}: {cause}")


async def _notify(callback: Optional[ProgressCallback], progress: float, message: str) -> None:
    """Invoke a sync or async progress callback, if one was given."""
    if callback is None:
        return
    outcome = callback(progress, message)
    if inspect.isawaitable(outcome):
        await outcome


def _consume_outcome(task: asyncio.Future) -> None:
    # abandoned work: mark a late exception as retrieved
    if not task.cancelled():
        task.exception()


class ErrorRecoveryManager:
    """Retry, timeout, snapshot and partial-recovery helpers for one run.

    Args:
        retry: Backoff settings.  Defaults to ``RetryConfig()``.
        recovery: Snapshot ring size and default stage timeout.
        sleep: Awaitable used for backoff delays.  Tests inject a recorder.
    """

    def __init__(
        self,
        retry: Optional[RetryConfig] = None,
        recovery: Optional[RecoveryConfig] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.retry = retry or RetryConfig()
        self.recovery = recovery or RecoveryConfig()
        self._sleep = sleep
        self._states: dict[str, deque[GenerationState]] = {}
        self._active_retries: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    async def save_generation_state(self, task_id: str, state: GenerationState) -> GenerationState:
        """Append *state* to the task's ring, evicting the oldest entry when full."""
        stamped = state.model_copy(update={"timestamp": time.time()})
        ring = self._states.get(task_id)
        if ring is None:
            ring = deque(maxlen=self.recovery.snapshot_limit)
            self._states[task_id] = ring
        ring.append(stamped)
        print_debug("recovery", f"Saved state for task {task_id} at step {state.step}")
        return stamped

    def get_available_rollback_points(self, task_id: str) -> list[GenerationState]:
        """Return the retained snapshots for *task_id*, oldest first."""
        return list(self._states.get(task_id, ()))

    async def rollback_to_state(self, task_id: str, state_index: int) -> Optional[GenerationState]:
        """Select snapshot *state_index* and discard every later snapshot.

        Returns:
            The selected snapshot, or ``None`` when the index is out of range.
        """
        ring = self._states.get(task_id)
        if not ring or state_index < 0 or state_index >= len(ring):
            print_error(f"Invalid rollback state index {state_index} for task {task_id}")
            return None

        target = ring[state_index]
        print_debug("recovery", f"Rolling back task {task_id} to state: {target.step}")
        while len(ring) > state_index + 1:
            ring.pop()
        return target

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------

    async def retry_generation(
        self,
        key: str,
        generation_fn: Callable[[], Awaitable[T]],
        on_progress: Optional[ProgressCallback] = None,
    ) -> T:
        """Run *generation_fn* up to ``max_retries`` times with backoff.

        The delay before attempt *n* is ``RetryConfig.delay_for(n)`` and
        applies to the first attempt as well.  ``ConfigurationError`` is not
        retried.  The retry counter for *key* is cleared however the call
        ends.

        Raises:
            RetryExhaustedError: After the last attempt fails.
        """
        max_retries = self.retry.max_retries
        last_error: Optional[BaseException] = None

        try:
            for attempt in range(1, max_retries + 1):
                self._active_retries[key] = attempt
                await _notify(on_progress, 0, f"Retrying generation (attempt {attempt}/{max_retries})")

                delay = self.retry.delay_for(attempt)
                if delay > 0:
                    print_debug("recovery", f"Waiting {delay:g}s before attempt {attempt} of {key}")
                    await self._sleep(delay)

                try:
                    result = await generation_fn()
                except ConfigurationError:
                    raise
                except Exception as exc:
                    last_error = exc
                    print_debug("recovery", f"Attempt {attempt} failed for {key}: {exc}")
                    continue

                await _notify(on_progress, 100, "Generation completed successfully")
                return result
        finally:
            self._active_retries.pop(key, None)

        print_error(f"Max retries exceeded for {key}")
        await _notify(
            on_progress, 0, f"Generation failed after {max_retries} attempts: {last_error}"
        )
        raise RetryExhaustedError(max_retries, last_error) from last_error

    # ------------------------------------------------------------------
    # Timeout
    # ------------------------------------------------------------------

    async def handle_timeout(
        self,
        task_id: str,
        timeout: float,
        generation_fn: Callable[[], Awaitable[T]],
    ) -> T:
        """Await *generation_fn* for at most *timeout* seconds.

        On timeout the work keeps running in the background and its eventual
        result is discarded.

        Raises:
            GenerationTimeoutError: If the deadline passes first.
        """
        work = asyncio.ensure_future(generation_fn())
        try:
            return await asyncio.wait_for(asyncio.shield(work), timeout)
        except asyncio.TimeoutError:
            work.add_done_callback(_consume_outcome)
            print_error(f"Generation timeout after {timeout:g}s for task {task_id}")
            raise GenerationTimeoutError(timeout) from None

    # ------------------------------------------------------------------
    # Partial recovery
    # ------------------------------------------------------------------

    async def partial_recovery(
        self,
        task_id: str,
        last_successful_step: str,
        remaining_steps: list[str],
        generation_fn: Callable[[str], Awaitable[Any]],
        on_progress: Optional[ProgressCallback] = None,
        project_id: str = "",
    ) -> list[Any]:
        """Resume a task by running each remaining step through the retry wrapper.

        A snapshot is saved before every step.  Step progress is folded into
        the overall progress as ``i / total * 100 + step_progress / total``.

        Raises:
            PartialRecoveryError: On the first step that exhausts its retries.
        """
        print_debug(
            "recovery",
            f"Starting partial recovery for task {task_id} from step: {last_successful_step}",
        )
        results: list[Any] = []
        total = len(remaining_steps)

        for index, step in enumerate(remaining_steps):
            progress = round(index / total * 100)
            await _notify(on_progress, progress, f"Recovering step: {step}")

            await self.save_generation_state(
                task_id,
                GenerationState(
                    project_id=project_id,
                    step=step,
                    data=list(results),
                    logs=[f"Starting recovery step: {step}"],
                ),
            )

            async def relay(step_progress: float, message: str) -> None:
                await _notify(on_progress, progress + step_progress / total, f"{step}: {message}")

            try:
                results.append(
                    await self.retry_generation(
                        f"{task_id}-{step}", functools.partial(generation_fn, step), relay
                    )
                )
            except Exception as exc:
                print_error(f"Partial recovery failed at step {step}: {exc}")
                raise PartialRecoveryError(step, exc) from exc

        await _notify(on_progress, 100, "Partial recovery completed successfully")
        return results

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def clear_task_states(self, task_id: str) -> None:
        """Drop every snapshot and retry counter held for *task_id*."""
        self._states.pop(task_id, None)
        self._active_retries.pop(task_id, None)
        print_debug("recovery", f"Cleared all states for task {task_id}")

    def get_retry_stats(self) -> dict[str, Any]:
        return {
            "active_retries": sorted(self._active_retries.items()),
            "total_saved_states": sum(len(ring) for ring in self._states.values()),
            "tasks_with_states": len(self._states),
        }
