"""Minimal GraphQL transport for the Railway API.

One POST per call, bearer auth, and a typed exception for every failure
mode. No retries happen here; callers decide whether to try again.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_OPERATION_NAME = re.compile(r"\b(query|mutation)\s+(\w+)")


class GraphQLClientError(Exception):
    """Base error for anything that went wrong talking to the GraphQL endpoint."""

    def __init__(self, message: str, status_code: int | None = None, status_text: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text


class UnauthorizedError(GraphQLClientError):
    def __init__(self) -> None:
        super().__init__(
            "You are not authorized to access this resource. Make sure that you pass a valid token.",
            status_code=401,
        )


class RateLimitError(GraphQLClientError):
    def __init__(self) -> None:
        super().__init__("You have reached the rate limit. Please try again later.", status_code=429)


class GraphQLError(GraphQLClientError):
    """The server reported an operation error; message is the first one listed."""

    def __init__(self, errors: list[dict[str, Any]], status_code: int | None = None) -> None:
        first = errors[0].get("message") if isinstance(errors[0], dict) else None
        super().__init__(first or "Unknown GraphQL error", status_code=status_code)
        self.errors = errors


class RequestError(GraphQLClientError):
    def __init__(self, status_code: int, status_text: str) -> None:
        super().__init__(
            f"GraphQL request failed with status {status_code}: {status_text}",
            status_code=status_code,
            status_text=status_text,
        )


def _operation_name(query: str) -> str:
    match = _OPERATION_NAME.search(query)
    return match.group(2) if match else "anonymous"


def _error_list(body: Any) -> list[dict[str, Any]] | None:
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return errors
    return None


class GraphQLClient:
    """Sends GraphQL operations to a single endpoint with a bearer token.

    Pass an existing httpx.AsyncClient to share a connection pool; a client
    created here is owned and closed by close().
    """

    def __init__(self, endpoint: str, token: str, http: httpx.AsyncClient | None = None) -> None:
        self.endpoint = endpoint
        self._token = token
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient()

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token}",
        }

    async def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run one operation and return its `data` payload unchanged."""
        variables = variables or {}
        name = _operation_name(query)
        logger.debug("GraphQL %s (variables: %s)", name, sorted(variables))

        try:
            response = await self._http.post(
                self.endpoint,
                json={"query": query, "variables": variables},
                headers=self.headers,
            )
        except httpx.HTTPError as e:
            logger.warning("GraphQL %s transport failure: %s", name, e)
            raise GraphQLClientError(f"GraphQL request failed: {e}") from e

        if response.is_success:
            body = _json_or_none(response)
            errors = _error_list(body)
            if errors:
                logger.warning("GraphQL %s returned errors: %s", name, errors[0])
                raise GraphQLError(errors, status_code=response.status_code)
            if not isinstance(body, dict) or "data" not in body:
                raise GraphQLClientError("There is no data in the response.", status_code=response.status_code)
            return body["data"]

        status = response.status_code
        logger.warning("GraphQL %s failed with HTTP %d", name, status)
        if status == 401:
            raise UnauthorizedError()
        if status == 429:
            raise RateLimitError()
        if status == 503:
            raise GraphQLClientError(
                "Service unavailable. Please try again later.",
                status_code=status,
                status_text=response.reason_phrase,
            )
        errors = _error_list(_json_or_none(response))
        if errors:
            raise GraphQLError(errors, status_code=status)
        raise RequestError(status, response.reason_phrase)

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
