"""
Constants for the GitHub repository lister.

This module contains all hardcoded values, configuration defaults, and display
strings so they can be tuned in one place.
"""

import os
from typing import Dict, List, Optional

# =============================================================================
# API and Network Configuration
# =============================================================================

# GitHub API settings
GITHUB_API_URL: str = os.getenv("GITHUB_API_URL", "https://api.github.com/graphql")

# No timeout by default: a stalled request blocks until the server answers
REQUEST_TIMEOUT: Optional[float] = None

# Pagination settings (GitHub caps connections at 100 nodes per page)
REPOSITORIES_PAGE_SIZE: int = 100
REPOSITORY_AFFILIATIONS: List[str] = ["OWNER", "ORGANIZATION_MEMBER", "COLLABORATOR"]

# Authorization header scheme used with the personal access token
AUTHORIZATION_SCHEME: str = "token"

# =============================================================================
# Display Configuration
# =============================================================================

# Column header for the repository names in grouped output
REPOSITORY_COLUMN: str = "Repository"

# Placeholder for repositories without a default branch
MISSING_BRANCH_PLACEHOLDER: str = "---"

# Separator between repository names inside one grouped cell
GROUP_NAME_SEPARATOR: str = "\n"

# Console status symbols
STATUS_SYMBOLS: Dict[str, str] = {
    "success": "✔",
    "error": "✖",
    "info": "ℹ",
    "warning": "⚠"
}

# =============================================================================
# Error Messages and Logging
# =============================================================================

ERROR_MESSAGES: Dict[str, str] = {
    "no_token": "env variable GITHUB_PAT not found",
    "invalid_field": "Invalid Field",
    "api_error": "Error communicating with GitHub API.",
    "invalid_data": "Invalid data format received.",
    "invalid_timeout": "env variable REQUEST_TIMEOUT must be a number of seconds"
}

INFO_MESSAGES: Dict[str, str] = {
    "fetching_page": "Fetching repositories page {page}...",
    "total_count": "Viewer has access to {count} repositories.",
    "fetch_complete": "Fetched {count} repositories in {pages} page(s)."
}

LOG_FORMAT: str = "%(message)s"

# =============================================================================
# Environment Variables
# =============================================================================

ENV_VARS: Dict[str, str] = {
    "github_token": "GITHUB_PAT",
    "api_url": "GITHUB_API_URL",
    "request_timeout": "REQUEST_TIMEOUT"
}

# =============================================================================
# GraphQL Query Fragments
# =============================================================================

GRAPHQL_FRAGMENTS: Dict[str, str] = {
    "repository_fields": """
        name
        owner {
            login
        }
        isPrivate
        defaultBranchRef {
            name
        }
        viewerPermission
    """,

    "page_info_fields": """
        endCursor
        hasNextPage
    """,

    "rate_limit_fields": """
        cost
        remaining
    """
}
