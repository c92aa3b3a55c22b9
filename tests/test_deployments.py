"""Unit tests for porter/railway/deployments.py -- the deployment wait loop.

Time is simulated: FakeClock advances only when the waiter sleeps, so
tests run instantly and poll counts are exact.
"""

from unittest.mock import AsyncMock

import pytest

from porter.errors import ValidationError
from porter.railway.deployments import DeploymentWaiter, WaitOutcome
from porter.railway.graphql import RateLimitError
from porter.railway.schemas import RailwayDeployment


def _deployment(status: str, url: str | None = None) -> RailwayDeployment:
    return RailwayDeployment(id="deploy-123", status=status, url=url)


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def waiter(client, clock) -> DeploymentWaiter:
    return DeploymentWaiter(client, poll_interval=5, clock=clock, sleep=clock.sleep)


class TestTerminalOutcomes:
    async def test_polls_until_success(self, waiter, client, clock):
        client.find_deployment.side_effect = [
            _deployment("BUILDING"),
            _deployment("BUILDING"),
            _deployment("SUCCESS", "https://app.example.com"),
        ]

        result = await waiter.wait("deploy-123")

        assert result.outcome is WaitOutcome.SUCCEEDED
        assert result.succeeded
        assert result.deployment.url == "https://app.example.com"
        assert result.message == "Deployment completed successfully. URL: https://app.example.com"
        assert client.find_deployment.await_count == 3
        assert result.polls == 3
        assert clock.sleeps == [5, 5]

    async def test_success_without_url(self, waiter, client):
        client.find_deployment.return_value = _deployment("SUCCESS")

        result = await waiter.wait("deploy-123")

        assert result.message == "Deployment completed successfully."

    @pytest.mark.parametrize("status", ["FAILED", "CANCELLED", "CRASHED", "REMOVED"])
    async def test_unsuccessful_terminal_status(self, waiter, client, clock, status):
        client.find_deployment.return_value = _deployment(status)

        result = await waiter.wait("deploy-123")

        assert result.outcome is WaitOutcome.FAILED
        assert not result.succeeded
        assert result.message == f"Deployment failed with status: {status}"
        assert clock.sleeps == []

    async def test_not_found(self, waiter, client):
        client.find_deployment.return_value = None

        result = await waiter.wait("nonexistent-deploy")

        assert result.outcome is WaitOutcome.NOT_FOUND
        assert result.message == "Deployment not found."

    async def test_fetch_error_stops_immediately(self, waiter, client, clock):
        error = RateLimitError()
        client.find_deployment.side_effect = [_deployment("DEPLOYING"), error]

        result = await waiter.wait("deploy-123")

        assert result.outcome is WaitOutcome.ERRORED
        assert result.error is error
        assert client.find_deployment.await_count == 2
        assert result.message == "Failed to check deployment status. Please try again later."


class TestTimeout:
    async def test_times_out_without_polling_past_deadline(self, waiter, client, clock):
        client.find_deployment.return_value = _deployment("BUILDING")

        result = await waiter.wait("deploy-123", max_wait_time=10)

        assert result.outcome is WaitOutcome.TIMED_OUT
        assert result.message == "Deployment did not complete within 10 seconds."
        # Polls at t=0 and t=5; at t=10 the deadline has passed
        assert client.find_deployment.await_count == 2
        assert clock.now == 10

    async def test_default_max_wait(self, waiter, client, clock):
        client.find_deployment.return_value = _deployment("QUEUED")

        result = await waiter.wait("deploy-123")

        assert result.outcome is WaitOutcome.TIMED_OUT
        assert result.max_wait_time == 300
        assert client.find_deployment.await_count == 60


class TestValidation:
    async def test_empty_deployment_id(self, waiter, client):
        with pytest.raises(ValidationError):
            await waiter.wait("")
        client.find_deployment.assert_not_awaited()

    async def test_non_positive_max_wait(self, waiter, client):
        with pytest.raises(ValidationError):
            await waiter.wait("deploy-123", max_wait_time=0)
        client.find_deployment.assert_not_awaited()

    def test_non_positive_interval(self, client):
        with pytest.raises(ValidationError):
            DeploymentWaiter(client, poll_interval=0)
