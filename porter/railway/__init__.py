"""Railway module: GraphQL transport, domain client, and deployment polling.

Public API: RailwayClient, DeploymentWaiter, transport errors, and DTOs.
"""

from porter.railway.client import RailwayClient
from porter.railway.deployments import (
    TERMINAL_STATUSES,
    DeploymentWaiter,
    WaitOutcome,
    WaitResult,
)
from porter.railway.graphql import (
    GraphQLClient,
    GraphQLClientError,
    GraphQLError,
    RateLimitError,
    RequestError,
    UnauthorizedError,
)
from porter.railway.schemas import (
    RailwayDeployment,
    RailwayEnvironment,
    RailwayProject,
    RailwayService,
    RailwayServiceDomain,
    ServiceSource,
)

__all__ = [
    "DeploymentWaiter",
    "GraphQLClient",
    "GraphQLClientError",
    "GraphQLError",
    "RailwayClient",
    "RailwayDeployment",
    "RailwayEnvironment",
    "RailwayProject",
    "RailwayService",
    "RailwayServiceDomain",
    "RateLimitError",
    "RequestError",
    "ServiceSource",
    "TERMINAL_STATUSES",
    "UnauthorizedError",
    "WaitOutcome",
    "WaitResult",
]
