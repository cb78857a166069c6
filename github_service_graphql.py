"""
GitHub GraphQL Service Module

This module provides the query builder, the GraphQL transport, and the
paginator that collects every repository affiliated with the authenticated
viewer, together with the rate-limit points spent doing so.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

# Import shared modules
from constants import (
    GITHUB_API_URL, REQUEST_TIMEOUT, ERROR_MESSAGES, INFO_MESSAGES, GRAPHQL_FRAGMENTS,
    REPOSITORIES_PAGE_SIZE, REPOSITORY_AFFILIATIONS, AUTHORIZATION_SCHEME
)
from utils import RepositoryRecord

logger = logging.getLogger(__name__)


class MissingCredentialError(Exception):
    """Raised when no GitHub token is configured."""

    def __init__(self, message: str = ERROR_MESSAGES["no_token"]):
        super().__init__(message)


class TransportError(RuntimeError):
    """Raised when a GraphQL call fails or returns no data. Never retried."""


@dataclass
class RateLimitUsage:
    """Running rate-limit totals across all fetched pages."""

    cost: int = 0
    remaining: Optional[int] = None

    def record(self, rate_limit: Dict[str, int]) -> None:
        self.cost += rate_limit["cost"]
        self.remaining = rate_limit["remaining"]


QueryRunner = Callable[..., Dict[str, Any]]


# =============================================================================
# Core GraphQL Functions
# =============================================================================

def execute_graphql_query(token: str, query: str, api_url: str = GITHUB_API_URL,
                          timeout: Optional[float] = REQUEST_TIMEOUT) -> Dict[str, Any]:
    """
    Execute a GraphQL query against the GitHub API.

    Args:
        token: GitHub personal access token
        query: GraphQL query string
        api_url: GraphQL endpoint URL
        timeout: Request timeout in seconds, None to wait indefinitely

    Returns:
        Query result dictionary

    Raises:
        TransportError: If the request fails or the response carries only errors
    """
    headers = {"Authorization": f"{AUTHORIZATION_SCHEME} {token}"}
    payload = {"query": query}

    try:
        response = requests.post(api_url, json=payload, headers=headers, timeout=timeout)
        response.raise_for_status()
        result = response.json()
    except requests.exceptions.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else "?"
        raise TransportError(f"{ERROR_MESSAGES['api_error']} HTTP {status}") from exc
    except requests.exceptions.RequestException as exc:
        raise TransportError(f"{ERROR_MESSAGES['api_error']} {type(exc).__name__}: {exc}") from exc
    except ValueError as exc:
        raise TransportError(ERROR_MESSAGES["invalid_data"]) from exc

    if not isinstance(result, dict):
        raise TransportError(ERROR_MESSAGES["invalid_data"])
    if not result.get("data"):
        messages = [error.get("message", "") for error in result.get("errors") or [] if isinstance(error, dict)]
        raise TransportError("; ".join(messages) or ERROR_MESSAGES["invalid_data"])

    return result


# =============================================================================
# Query Builder
# =============================================================================

def build_repositories_query(end_cursor: Optional[str] = None) -> str:
    """
    Build the GraphQL query for one page of viewer repositories.

    Args:
        end_cursor: Cursor returned by the previous page, None for the first page

    Returns:
        Complete GraphQL query string
    """
    after_argument = f'after: "{end_cursor}"' if end_cursor else ""
    affiliations = ", ".join(REPOSITORY_AFFILIATIONS)

    return f"""
    query {{
      viewer {{
        repositories(
          first: {REPOSITORIES_PAGE_SIZE}
          affiliations: [{affiliations}]
          {after_argument}
        ) {{
          totalCount
          pageInfo {{
            {GRAPHQL_FRAGMENTS['page_info_fields']}
          }}
          nodes {{
            {GRAPHQL_FRAGMENTS['repository_fields']}
          }}
        }}
      }}
      rateLimit {{
        {GRAPHQL_FRAGMENTS['rate_limit_fields']}
      }}
    }}
    """


# =============================================================================
# Paginator
# =============================================================================

class RepositoryPaginator:
    """
    Fetches every viewer repository page by page.

    Pages are requested strictly in sequence since each request needs the
    cursor of the previous one. Failures end the loop; nothing is retried.
    """

    def __init__(self, token: Optional[str], api_url: str = GITHUB_API_URL,
                 timeout: Optional[float] = REQUEST_TIMEOUT,
                 query_runner: Optional[QueryRunner] = None):
        if not token:
            raise MissingCredentialError()
        self.token = token
        self.api_url = api_url
        self.timeout = timeout
        self.query_runner = query_runner or execute_graphql_query

    def fetch_page(self, end_cursor: Optional[str]) -> Dict[str, Any]:
        """Run the query for the page following end_cursor and return its data."""
        query = build_repositories_query(end_cursor)
        result = self.query_runner(self.token, query, api_url=self.api_url, timeout=self.timeout)
        return result["data"]

    def fetch_all(self) -> Tuple[List[RepositoryRecord], RateLimitUsage]:
        """
        Fetch all pages of viewer repositories.

        Returns:
            Tuple of (records in fetch order, accumulated rate-limit usage)

        Raises:
            TransportError: If any page request fails
        """
        repositories: List[RepositoryRecord] = []
        usage = RateLimitUsage()
        end_cursor = None
        has_next_page = True
        page_number = 0

        while has_next_page:
            page_number += 1
            logger.debug(INFO_MESSAGES["fetching_page"].format(page=page_number))
            data = self.fetch_page(end_cursor)

            connection = data["viewer"]["repositories"]
            page_info = connection["pageInfo"]
            if page_number == 1 and "totalCount" in connection:
                logger.info(INFO_MESSAGES["total_count"].format(count=connection["totalCount"]))

            repositories.extend(RepositoryRecord.from_node(node) for node in connection["nodes"])
            end_cursor = page_info["endCursor"]
            has_next_page = page_info["hasNextPage"]
            usage.record(data["rateLimit"])

        logger.info(INFO_MESSAGES["fetch_complete"].format(count=len(repositories), pages=page_number))
        return repositories, usage


def fetch_viewer_repositories(token: Optional[str], api_url: str = GITHUB_API_URL,
                              timeout: Optional[float] = REQUEST_TIMEOUT) -> Tuple[List[RepositoryRecord], RateLimitUsage]:
    """Fetch every repository affiliated with the viewer owning token."""
    return RepositoryPaginator(token, api_url=api_url, timeout=timeout).fetch_all()
