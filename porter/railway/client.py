"""Railway domain client: typed operations on top of GraphQLClient.

Each method issues one operation, validates the response into its
envelope model, and flattens it. Transport errors propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from porter.config import Settings
from porter.errors import ConfigurationError
from porter.railway import queries
from porter.railway.graphql import GraphQLClient
from porter.railway.schemas import (
    CreateServiceData,
    CreateServiceDomainData,
    FindDeploymentData,
    LatestDeploymentData,
    ListEnvironmentsData,
    ListProjectsData,
    ListServicesData,
    RailwayDeployment,
    RailwayEnvironment,
    RailwayProject,
    RailwayService,
    RailwayServiceDomain,
    ServiceSource,
    flatten_environments,
    flatten_latest_deployment,
    flatten_projects,
    flatten_services,
)

logger = logging.getLogger(__name__)


class RailwayClient:
    def __init__(self, graphql: GraphQLClient) -> None:
        self.graphql = graphql

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.AsyncClient | None = None) -> "RailwayClient":
        """Build a client from settings. Raises ConfigurationError without a token."""
        if not settings.railway_api_token:
            raise ConfigurationError("RAILWAY_API_TOKEN is not set.")
        return cls(GraphQLClient(settings.railway_api_endpoint, settings.railway_api_token, http))

    async def close(self) -> None:
        await self.graphql.close()

    async def list_projects(self) -> list[RailwayProject]:
        data = await self.graphql.request(queries.LIST_PROJECTS)
        projects = flatten_projects(ListProjectsData.model_validate(data))
        logger.debug("Listed %d projects", len(projects))
        return projects

    async def list_services(self, project_id: str) -> list[RailwayService]:
        data = await self.graphql.request(queries.LIST_SERVICES, {"projectId": project_id})
        return flatten_services(ListServicesData.model_validate(data))

    async def create_service(
        self,
        project_id: str,
        source: ServiceSource | dict[str, Any],
    ) -> RailwayService:
        """Create a service from a repo or an image.

        The caller decides which source to use; the source is sent as given.
        The mutation does not return deployments, so the result has none.
        """
        if isinstance(source, ServiceSource):
            source = source.model_dump(exclude_none=True)
        data = await self.graphql.request(
            queries.CREATE_SERVICE,
            {"projectId": project_id, "source": source},
        )
        service = CreateServiceData.model_validate(data).service_create
        logger.info("Created service %s (%s) in project %s", service.name, service.id, project_id)
        return service

    async def find_deployment(self, deployment_id: str) -> RailwayDeployment | None:
        data = await self.graphql.request(queries.FIND_DEPLOYMENT, {"deploymentId": deployment_id})
        return FindDeploymentData.model_validate(data).deployment

    async def get_latest_deployment_for_service(self, service_id: str) -> RailwayDeployment | None:
        data = await self.graphql.request(queries.LATEST_DEPLOYMENT, {"serviceId": service_id})
        return flatten_latest_deployment(LatestDeploymentData.model_validate(data))

    async def create_service_domain(
        self,
        environment_id: str,
        service_id: str,
        target_port: int | None = None,
    ) -> RailwayServiceDomain:
        domain_input: dict[str, Any] = {"environmentId": environment_id, "serviceId": service_id}
        if target_port is not None:
            domain_input["targetPort"] = target_port
        data = await self.graphql.request(queries.CREATE_SERVICE_DOMAIN, {"input": domain_input})
        domain = CreateServiceDomainData.model_validate(data).service_domain_create
        logger.info("Created domain %s for service %s", domain.domain or domain.id, service_id)
        return domain

    async def list_environments(self, project_id: str) -> list[RailwayEnvironment]:
        data = await self.graphql.request(queries.LIST_ENVIRONMENTS, {"projectId": project_id})
        return flatten_environments(ListEnvironmentsData.model_validate(data))
