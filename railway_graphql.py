"""
Railway GraphQL client.
Sends queries and mutations to the Railway API and resolves/restarts deployments.
"""

import json
import logging

import requests

# Seconds. requests applies this to the connect and to each socket read, not to
# the call as a whole, so a server trickling bytes can stretch one call past it.
REQUEST_TIMEOUT = 30

QUERY_LATEST_DEPLOYMENT = """
query ($projectId: String!, $environmentId: String!, $serviceId: String!) {
  deployments(
    first: 1
    input: {
      projectId: $projectId
      environmentId: $environmentId
      serviceId: $serviceId
      status: { in: [SUCCESS] }
    }
  ) {
    edges {
      node {
        id
        status
      }
    }
  }
}
"""

MUTATION_RESTART = """
mutation ($id: String!) {
  deploymentRestart(id: $id)
}
"""


class RailwayAPIError(Exception):
    """Base class for failures talking to the Railway API."""


class RequestBuildError(RailwayAPIError):
    pass


class TransportError(RailwayAPIError):
    pass


class UnexpectedStatusError(RailwayAPIError):
    def __init__(self, status_code):
        super().__init__(f"unexpected status {status_code}")
        self.status_code = status_code


class ResponseDecodeError(RailwayAPIError):
    pass


class GraphQLError(RailwayAPIError):
    def __init__(self, message):
        super().__init__(f"graphql error: {message}")
        self.graphql_message = message


class DeploymentQueryError(RailwayAPIError):
    pass


class DeploymentParseError(RailwayAPIError):
    pass


class NoActiveDeploymentError(RailwayAPIError):
    def __init__(self):
        super().__init__("no active deployment found")


class DeploymentRestartError(RailwayAPIError):
    pass


class RailwayClient:
    """Thin wrapper over a requests session bound to one token and endpoint."""

    def __init__(self, api_token, api_url, session=None, timeout=REQUEST_TIMEOUT):
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def execute(self, query, variables=None):
        """POST one operation and return the `data` part of the envelope."""
        payload = {"query": query}
        if variables:
            payload["variables"] = variables
        try:
            body = json.dumps(payload)
        except (TypeError, ValueError) as e:
            raise RequestBuildError(f"marshaling request: {e}") from e

        try:
            response = self.session.post(
                self.api_url,
                data=body,
                headers=self._headers,
                timeout=self.timeout,
            )
        except (requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema,
                requests.exceptions.InvalidURL) as e:
            raise RequestBuildError(f"creating request: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"sending request: {e}") from e

        if response.status_code != 200:
            raise UnexpectedStatusError(response.status_code)

        try:
            envelope = response.json()
        except ValueError as e:
            raise ResponseDecodeError(f"decoding response: {e}") from e
        if not isinstance(envelope, dict):
            raise ResponseDecodeError("decoding response: envelope is not a JSON object")

        logging.debug(f"GraphQL response: {envelope}")

        errors = envelope.get("errors") or []
        if not isinstance(errors, list):
            raise ResponseDecodeError("decoding response: errors is not a list")
        if errors:
            first = errors[0]
            if isinstance(first, dict):
                message = first.get("message") or ""
            else:
                message = first
            raise GraphQLError(str(message))

        return envelope.get("data")


def get_latest_deployment(client, project_id, environment_id, service_id):
    """Return the id of the service's most recent SUCCESS deployment.

    Ordering and status filtering happen server side; we take the single edge
    the API hands back and trust it to be the newest.
    """
    try:
        data = client.execute(QUERY_LATEST_DEPLOYMENT, {
            "projectId": project_id,
            "environmentId": environment_id,
            "serviceId": service_id,
        })
    except RailwayAPIError as e:
        raise DeploymentQueryError(f"querying deployments: {e}") from e

    try:
        edges = data["deployments"]["edges"]
        nodes = [{"id": edge["node"]["id"], "status": edge["node"].get("status")}
                 for edge in edges]
    except (KeyError, TypeError, AttributeError) as e:
        raise DeploymentParseError(f"parsing deployments: unexpected payload {data!r}") from e

    for node in nodes:
        if not isinstance(node["id"], str) or not node["id"]:
            raise DeploymentParseError(f"parsing deployments: bad deployment id {node['id']!r}")

    if not nodes:
        raise NoActiveDeploymentError()

    logging.debug(f"Latest deployment for service {service_id}: {nodes[0]}")
    return nodes[0]["id"]


def restart_deployment(client, deployment_id):
    """Restart a deployment in place (no rebuild, no redeploy)."""
    try:
        data = client.execute(MUTATION_RESTART, {"id": deployment_id})
    except RailwayAPIError as e:
        raise DeploymentRestartError(f"restarting deployment: {e}") from e

    if isinstance(data, dict) and data.get("deploymentRestart") is False:
        raise DeploymentRestartError("restarting deployment: restart not acknowledged")
