"""GraphQL operation texts for the Railway public API (v2)."""

_DEPLOYMENT_FIELDS = """
      canRedeploy
      canRollback
      createdAt
      deploymentStopped
      id
      projectId
      snapshotId
      staticUrl
      status
      statusUpdatedAt
      suggestAddServiceDomain
      updatedAt
      url
"""

LIST_PROJECTS = """
  query listProjects {
    me {
      workspaces {
        team {
          projects {
            edges {
              node {
                createdAt
                deletedAt
                description
                id
                isPublic
                name
              }
            }
          }
        }
      }
    }
  }
"""

LIST_SERVICES = f"""
  query listServices($projectId: String!) {{
    project(id: $projectId) {{
      services {{
        edges {{
          node {{
            createdAt
            deletedAt
            id
            name
            projectId
            updatedAt
            deployments {{
              edges {{
                node {{{_DEPLOYMENT_FIELDS}                }}
              }}
            }}
          }}
        }}
      }}
    }}
  }}
"""

CREATE_SERVICE = """
  mutation createService($projectId: String!, $source: ServiceSourceInput!) {
    serviceCreate(input: { projectId: $projectId, source: $source }) {
      createdAt
      deletedAt
      id
      name
      projectId
      updatedAt
    }
  }
"""

FIND_DEPLOYMENT = f"""
  query findDeployment($deploymentId: String!) {{
    deployment(id: $deploymentId) {{{_DEPLOYMENT_FIELDS}    }}
  }}
"""

LATEST_DEPLOYMENT = f"""
  query latestDeployment($serviceId: String!) {{
    deployments(first: 1, input: {{ serviceId: $serviceId }}) {{
      edges {{
        node {{{_DEPLOYMENT_FIELDS}        }}
      }}
    }}
  }}
"""

CREATE_SERVICE_DOMAIN = """
  mutation createServiceDomain($input: ServiceDomainCreateInput!) {
    serviceDomainCreate(input: $input) {
      id
      domain
      serviceId
      environmentId
      targetPort
    }
  }
"""

LIST_ENVIRONMENTS = """
  query listEnvironments($projectId: String!) {
    project(id: $projectId) {
      environments {
        edges {
          node {
            createdAt
            id
            name
            projectId
            updatedAt
          }
        }
      }
    }
  }
"""
