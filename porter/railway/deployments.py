"""Deployment wait loop: poll a deployment until it settles or time runs out.

The loop suspends on each sleep, so it never blocks the event loop. It
stops on the first terminal status, on a missing deployment, on the first
fetch error, or once max_wait_time has elapsed. Wrap the call in
asyncio.wait_for for an outer deadline; CancelledError is not caught.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from porter.errors import ValidationError
from porter.railway.client import RailwayClient
from porter.railway.schemas import RailwayDeployment

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"SUCCESS", "FAILED", "CANCELLED", "CRASHED", "REMOVED"})
DEFAULT_POLL_INTERVAL = 5.0  # seconds
DEFAULT_MAX_WAIT = 300  # seconds


class WaitOutcome(enum.StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


@dataclass
class WaitResult:
    outcome: WaitOutcome
    deployment_id: str
    max_wait_time: float
    polls: int
    deployment: RailwayDeployment | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is WaitOutcome.SUCCEEDED

    @property
    def message(self) -> str:
        if self.outcome is WaitOutcome.SUCCEEDED:
            url = self.deployment.url if self.deployment else None
            if url:
                return f"Deployment completed successfully. URL: {url}"
            return "Deployment completed successfully."
        if self.outcome is WaitOutcome.FAILED:
            status = self.deployment.status if self.deployment else "UNKNOWN"
            return f"Deployment failed with status: {status}"
        if self.outcome is WaitOutcome.NOT_FOUND:
            return "Deployment not found."
        if self.outcome is WaitOutcome.TIMED_OUT:
            return f"Deployment did not complete within {self.max_wait_time:g} seconds."
        return "Failed to check deployment status. Please try again later."


class DeploymentWaiter:
    """Polls RailwayClient.find_deployment until a terminal outcome.

    clock and sleep are injectable so tests can drive time by hand.
    """

    def __init__(
        self,
        client: RailwayClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if poll_interval <= 0:
            raise ValidationError("poll_interval must be > 0")
        self._client = client
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    async def wait(self, deployment_id: str, max_wait_time: float = DEFAULT_MAX_WAIT) -> WaitResult:
        if not deployment_id:
            raise ValidationError("Deployment ID is required")
        if max_wait_time <= 0:
            raise ValidationError("max_wait_time must be > 0")

        start = self._clock()
        polls = 0

        def result(outcome: WaitOutcome, **kwargs) -> WaitResult:
            logger.info(
                "Deployment %s wait ended: %s after %d poll(s)", deployment_id, outcome.value, polls
            )
            return WaitResult(outcome, deployment_id, max_wait_time, polls, **kwargs)

        while self._clock() - start < max_wait_time:
            polls += 1
            try:
                deployment = await self._client.find_deployment(deployment_id)
            except Exception as e:
                logger.warning("Polling deployment %s failed: %s", deployment_id, e)
                return result(WaitOutcome.ERRORED, error=e)

            if deployment is None:
                return result(WaitOutcome.NOT_FOUND)

            if deployment.status in TERMINAL_STATUSES:
                outcome = WaitOutcome.SUCCEEDED if deployment.status == "SUCCESS" else WaitOutcome.FAILED
                return result(outcome, deployment=deployment)

            logger.debug("Deployment %s is %s, checking again in %gs", deployment_id, deployment.status, self.poll_interval)
            await self._sleep(self.poll_interval)

        return result(WaitOutcome.TIMED_OUT)
