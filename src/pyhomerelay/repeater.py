"""Paced command repeater for IR key presses.

This module turns a single logical intensity (e.g., "volume down 5 steps")
into a strictly sequential series of IR emissions:
- Emissions never overlap
- A fixed pause separates consecutive emissions
- The number of emissions is capped to bound request amplification
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pyhomerelay.const import MAX_IR_REPEAT, PAUSE_SECONDS
from pyhomerelay.exceptions import TransportError
from pyhomerelay.models import RepeatJob, RepeatRequest, RepeatState


if TYPE_CHECKING:
    from pyhomerelay.ir import IrEmitterClient

_LOGGER = logging.getLogger(__name__)


class CommandRepeater:
    """Emit one key several times with pacing.

    ``repeat`` runs the sequence and returns when it ends. ``start`` runs the
    same sequence as a detached task. Nothing awaits that task. Its outcome
    only goes to the log, which suits requests whose HTTP reply was already
    sent.

    Example:
        ```python
        async with IrEmitterClient("http://irserver:3000") as emitter:
            repeater = CommandRepeater(emitter)

            # Blocks for about 2 seconds (3 emissions, 2 pauses)
            job = await repeater.repeat("KEY_VOLUMEUP", "tv", 3)

            # Returns at once; the sequence continues in the background
            repeater.start("KEY_VOLUMEDOWN", "tv", 5)
        ```

    Attributes:
        pause: Seconds to wait between consecutive emissions.
        max_repeat: Ceiling applied to every requested count.
    """

    def __init__(
        self,
        emitter: IrEmitterClient,
        *,
        pause: float = PAUSE_SECONDS,
        max_repeat: int = MAX_IR_REPEAT,
    ) -> None:
        """Initialize the repeater.

        Args:
            emitter: Client used for each single emission.
            pause: Seconds to wait between consecutive emissions.
            max_repeat: Ceiling applied to every requested count.
        """
        self.pause = pause
        self.max_repeat = max_repeat
        self._emitter = emitter
        self._tasks: dict[asyncio.Task[RepeatJob], RepeatRequest] = {}

    @property
    def pending_count(self) -> int:
        """Get number of detached sequences still running."""
        return len(self._tasks)

    def effective_count(self, count: int) -> int:
        """Clamp a requested count to ``[0, max_repeat]``."""
        return max(0, min(count, self.max_repeat))

    async def repeat(self, key: str, endpoint_id: str, count: int) -> RepeatJob:
        """Emit ``key`` at ``endpoint_id`` up to ``count`` times.

        Counts of zero or less complete at once. Counts above ``max_repeat``
        are silently clamped. A single emission has no pause.

        Args:
            key: Hardware key identifier.
            endpoint_id: Receiver the key is aimed at.
            count: Requested number of emissions.

        Returns:
            The completed job.

        Raises:
            TransportError: If any emission fails. Remaining emissions are
                abandoned.
        """
        request = RepeatRequest(key=key, endpoint_id=endpoint_id, count=count)
        job = RepeatJob(request=request, effective_count=self.effective_count(count))

        if count > self.max_repeat:
            _LOGGER.debug("Clamping repeat of %s from %d to %d", key, count, self.max_repeat)

        try:
            for step in range(job.effective_count):
                if step:
                    job.state = RepeatState.PAUSED
                    await asyncio.sleep(self.pause)

                job.state = RepeatState.EMITTING
                await self._emitter.send_command(key, endpoint_id)
                job.emitted += 1

        except (TransportError, asyncio.CancelledError):
            job.state = RepeatState.FAILED
            _LOGGER.debug(
                "Repeat of %s at %s stopped after %d/%d emissions",
                key,
                endpoint_id,
                job.emitted,
                job.effective_count,
            )
            raise

        job.state = RepeatState.COMPLETED
        _LOGGER.debug("Repeat of %s at %s completed (%d emissions)", key, endpoint_id, job.emitted)
        return job

    def start(self, key: str, endpoint_id: str, count: int) -> asyncio.Task[RepeatJob]:
        """Run ``repeat`` as a detached task.

        The repeater keeps a reference to the task until it finishes, then
        logs the outcome. Callers may keep the returned task for inspection
        but are not expected to await it.

        Args:
            key: Hardware key identifier.
            endpoint_id: Receiver the key is aimed at.
            count: Requested number of emissions.

        Returns:
            The running task.
        """
        task = asyncio.create_task(
            self.repeat(key, endpoint_id, count),
            name=f"repeat-{key}-{endpoint_id}",
        )
        self._tasks[task] = RepeatRequest(key=key, endpoint_id=endpoint_id, count=count)
        task.add_done_callback(self._on_repeat_done)
        return task

    def _on_repeat_done(self, task: asyncio.Task[RepeatJob]) -> None:
        """Log the outcome of a detached sequence."""
        request = self._tasks.pop(task, None)

        if task.cancelled():
            _LOGGER.debug("Repeat %s cancelled", request)
            return

        exc = task.exception()
        if exc is not None:
            # Not inside an except block; exc_info must be explicit
            _LOGGER.exception("Repeat %s failed: %s", request, exc, exc_info=exc)
            return

        job = task.result()
        elapsed = (datetime.now(UTC) - job.started_at).total_seconds()
        _LOGGER.info(
            "Repeat of %s at %s finished with %d emissions in %.1fs",
            job.request.key,
            job.request.endpoint_id,
            job.emitted,
            elapsed,
        )

    async def shutdown(self) -> None:
        """Cancel all detached sequences and wait for them to stop."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()

        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError, TransportError):
                await task

        _LOGGER.debug("Command repeater shutdown complete (%d cancelled)", len(tasks))
