"""Pydantic DTOs for Railway resources and the wire envelopes they arrive in.

The public models (RailwayProject, RailwayService, ...) are what callers
see. The envelope models mirror each operation's response shape, and the
flatten_* functions turn edge/node nesting into plain lists so no other
module needs to know the wire layout.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class RailwayModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Public DTOs ---


class RailwayProject(RailwayModel):
    id: str
    name: str
    created_at: str | None = None
    deleted_at: str | None = None
    description: str | None = None
    is_public: bool = False


class RailwayDeployment(RailwayModel):
    id: str
    status: str
    project_id: str | None = None
    url: str | None = None
    static_url: str | None = None
    snapshot_id: str | None = None
    can_redeploy: bool = False
    can_rollback: bool = False
    deployment_stopped: bool = False
    suggest_add_service_domain: bool = False
    status_updated_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class RailwayService(RailwayModel):
    id: str
    name: str
    project_id: str
    created_at: str | None = None
    updated_at: str | None = None
    deleted_at: str | None = None
    deployments: list[RailwayDeployment] = []


class RailwayEnvironment(RailwayModel):
    id: str
    name: str
    project_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class RailwayServiceDomain(RailwayModel):
    id: str
    domain: str | None = None
    service_id: str | None = None
    environment_id: str | None = None
    target_port: int | None = None


class ServiceSource(RailwayModel):
    """Where a new service is built from: a GitHub repo or a Docker image."""

    repo: str | None = None
    image: str | None = None


# --- Wire envelopes ---


class Edge(BaseModel, Generic[T]):
    node: T


class Connection(BaseModel, Generic[T]):
    edges: list[Edge[T]] | None = None


def nodes(connection: Connection[T] | None) -> list[T]:
    """Unwrap a paginated connection; a null connection or edge list is empty."""
    if connection is None or not connection.edges:
        return []
    return [edge.node for edge in connection.edges]


class _Team(BaseModel):
    projects: Connection[RailwayProject] | None = None


class _Workspace(BaseModel):
    team: _Team | None = None


class _Me(BaseModel):
    workspaces: list[_Workspace] | None = None


class ListProjectsData(BaseModel):
    me: _Me | None = None


class _ServiceNode(RailwayModel):
    """A service as listed, with deployments still wrapped in edges."""

    id: str
    name: str
    project_id: str
    created_at: str | None = None
    updated_at: str | None = None
    deleted_at: str | None = None
    deployments: Connection[RailwayDeployment] | None = None


class _ProjectServices(BaseModel):
    services: Connection[_ServiceNode] | None = None


class ListServicesData(BaseModel):
    project: _ProjectServices | None = None


class CreateServiceData(RailwayModel):
    service_create: RailwayService


class FindDeploymentData(BaseModel):
    deployment: RailwayDeployment | None = None


class LatestDeploymentData(BaseModel):
    deployments: Connection[RailwayDeployment] | None = None


class CreateServiceDomainData(RailwayModel):
    service_domain_create: RailwayServiceDomain


class _ProjectEnvironments(BaseModel):
    environments: Connection[RailwayEnvironment] | None = None


class ListEnvironmentsData(BaseModel):
    project: _ProjectEnvironments | None = None


# --- Flattening ---


def flatten_projects(data: ListProjectsData) -> list[RailwayProject]:
    """Workspace order first, then edge order within each workspace."""
    if data.me is None:
        return []
    projects: list[RailwayProject] = []
    for workspace in data.me.workspaces or []:
        if workspace.team is not None:
            projects.extend(nodes(workspace.team.projects))
    return projects


def flatten_services(data: ListServicesData) -> list[RailwayService]:
    if data.project is None:
        return []
    return [
        RailwayService(
            id=node.id,
            name=node.name,
            project_id=node.project_id,
            created_at=node.created_at,
            updated_at=node.updated_at,
            deleted_at=node.deleted_at,
            deployments=nodes(node.deployments),
        )
        for node in nodes(data.project.services)
    ]


def flatten_latest_deployment(data: LatestDeploymentData) -> RailwayDeployment | None:
    found = nodes(data.deployments)
    return found[0] if found else None


def flatten_environments(data: ListEnvironmentsData) -> list[RailwayEnvironment]:
    if data.project is None:
        return []
    return nodes(data.project.environments)
