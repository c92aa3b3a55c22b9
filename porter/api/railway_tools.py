"""Railway tools for the agent: projects, services, deployments, domains.

Each tool validates its input, calls RailwayClient (or DeploymentWaiter),
and returns a JSON payload. Failures come back as {"error": "..."} with a
fixed message per tool; details go to the log only.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from porter.api.tools import ToolDispatcher, ToolResult, error_result, parse_input, tool_schema
from porter.railway.client import RailwayClient
from porter.railway.deployments import DEFAULT_MAX_WAIT, DeploymentWaiter, WaitOutcome
from porter.railway.schemas import RailwayModel, ServiceSource

logger = logging.getLogger(__name__)

_MAX_WAIT_LIMIT = 3600  # seconds


def _dump(model: RailwayModel | None) -> dict[str, Any] | None:
    return model.model_dump(mode="json", by_alias=True) if model is not None else None


# ---------------------------------------------------------------------------
# Tool inputs
# ---------------------------------------------------------------------------


class ListProjectsInput(BaseModel):
    pass


class ProjectInput(BaseModel):
    project_id: str = Field(min_length=1, description="Railway project ID")


class CreateServiceInput(BaseModel):
    project_id: str = Field(min_length=1, description="Railway project ID")
    repository: str | None = Field(None, description='GitHub repository, e.g. "railwayapp-templates/django"')
    docker_image: str | None = Field(None, description='Docker image, e.g. "alexwhen/docker-2048"')


class WaitForDeploymentInput(BaseModel):
    deployment_id: str = Field(min_length=1, description="Deployment ID to wait for")
    max_wait_time: int | None = Field(
        None,
        ge=1,
        le=_MAX_WAIT_LIMIT,
        description=f"Maximum seconds to wait (default {DEFAULT_MAX_WAIT})",
    )


class GenerateDomainInput(BaseModel):
    environment_id: str = Field(min_length=1, description="Railway environment ID")
    service_id: str = Field(min_length=1, description="Railway service ID")
    target_port: int | None = Field(None, ge=1, le=65535, description="Port the service listens on")


class ServiceInput(BaseModel):
    service_id: str = Field(min_length=1, description="Railway service ID")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_railway_tools(
    dispatcher: ToolDispatcher,
    client: RailwayClient,
    waiter: DeploymentWaiter,
    default_max_wait: int = DEFAULT_MAX_WAIT,
) -> None:
    """Register the Railway tools with the dispatcher.

    Creates closures over the client and waiter so one RailwayClient (and
    its connection pool) serves every call.
    """

    async def list_projects(**args: Any) -> ToolResult:
        params = parse_input(ListProjectsInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] list_projects")
        try:
            projects = await client.list_projects()
        except Exception:
            logger.exception("list_projects tool failed")
            return error_result("Failed to fetch projects. Please try again later.")
        return {"projects": [_dump(p) for p in projects]}

    async def list_services(**args: Any) -> ToolResult:
        params = parse_input(ProjectInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] list_services project=%s", params.project_id)
        try:
            services = await client.list_services(params.project_id)
        except Exception:
            logger.exception("list_services tool failed")
            return error_result("Failed to fetch services. Please try again later.")
        return {"services": [_dump(s) for s in services]}

    async def create_service(**args: Any) -> ToolResult:
        params = parse_input(CreateServiceInput, args)
        if isinstance(params, dict):
            return params
        if not params.repository and not params.docker_image:
            return error_result("Either repository or docker_image must be provided.")

        logger.info(
            "[Tool] create_service project=%s repository=%s docker_image=%s",
            params.project_id, params.repository, params.docker_image,
        )
        source = ServiceSource(repo=params.repository, image=params.docker_image)
        try:
            service = await client.create_service(params.project_id, source)
        except Exception:
            logger.exception("create_service tool failed")
            return error_result("Failed to create service. Please try again later.")

        # The create mutation returns no deployments; look up the one it triggered
        deployment_id = None
        try:
            latest = await client.get_latest_deployment_for_service(service.id)
            deployment_id = latest.id if latest else None
        except Exception as e:
            logger.warning("Latest deployment lookup for service %s failed: %s", service.id, e)

        if deployment_id:
            message = (
                f"Service created successfully. Latest deployment: {deployment_id}. "
                "Use wait_for_deployment with this ID to wait until it is live."
            )
        else:
            message = "Service created successfully. No deployment initiated yet."
        return {**_dump(service), "latestDeploymentId": deployment_id, "message": message}

    async def wait_for_deployment(**args: Any) -> ToolResult:
        params = parse_input(WaitForDeploymentInput, args)
        if isinstance(params, dict):
            return params
        max_wait = params.max_wait_time or default_max_wait
        logger.info("[Tool] wait_for_deployment %s (max %ds)", params.deployment_id, max_wait)

        try:
            result = await waiter.wait(params.deployment_id, max_wait)
        except Exception:
            logger.exception("wait_for_deployment tool failed")
            return error_result("Failed to check deployment status. Please try again later.")

        if result.outcome in (WaitOutcome.SUCCEEDED, WaitOutcome.FAILED):
            return {
                "deployment": _dump(result.deployment),
                "success": result.succeeded,
                "message": result.message,
            }
        if result.outcome is WaitOutcome.TIMED_OUT:
            return error_result(result.message, timeout=True)
        return error_result(result.message)

    async def generate_domain(**args: Any) -> ToolResult:
        params = parse_input(GenerateDomainInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] generate_domain service=%s env=%s", params.service_id, params.environment_id)
        try:
            domain = await client.create_service_domain(
                params.environment_id, params.service_id, params.target_port
            )
        except Exception:
            logger.exception("generate_domain tool failed")
            return error_result("Failed to create domain. Please try again later.")
        return {
            "domain": _dump(domain),
            "message": f"Domain created successfully: {domain.domain or 'Domain is being generated'}",
        }

    async def list_environments(**args: Any) -> ToolResult:
        params = parse_input(ProjectInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] list_environments project=%s", params.project_id)
        try:
            environments = await client.list_environments(params.project_id)
        except Exception:
            logger.exception("list_environments tool failed")
            return error_result("Failed to fetch environments. Please try again later.")
        return {"environments": [_dump(e) for e in environments]}

    async def get_latest_deployment(**args: Any) -> ToolResult:
        params = parse_input(ServiceInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] get_latest_deployment service=%s", params.service_id)
        try:
            deployment = await client.get_latest_deployment_for_service(params.service_id)
        except Exception:
            logger.exception("get_latest_deployment tool failed")
            return error_result("Failed to fetch the latest deployment. Please try again later.")
        if deployment is None:
            message = "This service has no deployments yet."
        else:
            message = f"Latest deployment {deployment.id} is {deployment.status}."
        return {"deployment": _dump(deployment), "message": message}

    dispatcher.register(
        "list_projects", list_projects,
        tool_schema(ListProjectsInput, "List all your Railway projects."),
    )
    dispatcher.register(
        "list_services", list_services,
        tool_schema(ProjectInput, "List all services, with their deployments, for a Railway project."),
    )
    dispatcher.register(
        "create_service", create_service,
        tool_schema(
            CreateServiceInput,
            "Create a new Railway service in a project from a GitHub repository or a Docker image.",
        ),
    )
    dispatcher.register(
        "wait_for_deployment", wait_for_deployment,
        tool_schema(
            WaitForDeploymentInput,
            "Wait for a deployment to finish. Returns its final status and URL.",
        ),
    )
    dispatcher.register(
        "generate_domain", generate_domain,
        tool_schema(GenerateDomainInput, "Generate a public Railway domain for a service in an environment."),
    )
    dispatcher.register(
        "list_environments", list_environments,
        tool_schema(ProjectInput, "List the environments of a Railway project."),
    )
    dispatcher.register(
        "get_latest_deployment", get_latest_deployment,
        tool_schema(ServiceInput, "Get the most recent deployment of a Railway service."),
    )
