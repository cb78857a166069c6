"""
GitHub Repository Lister

Command-line entry point: lists every repository the authenticated viewer
owns, collaborates on, or reaches through an organization, as a console table
that can be grouped by a field or sorted by name.
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

# Import shared modules and services
from constants import (
    GITHUB_API_URL, REQUEST_TIMEOUT, ENV_VARS, ERROR_MESSAGES, LOG_FORMAT
)
from github_service_graphql import MissingCredentialError, RepositoryPaginator, TransportError
from repo_table import (
    build_repository_table, print_api_points, print_error, print_field_names,
    render_table, resolve_presentation_mode
)
from utils import InvalidFieldError

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when an environment setting cannot be parsed."""


# =============================================================================
# Configuration and Setup
# =============================================================================

def get_application_config() -> Dict[str, Any]:
    """
    Get application configuration from environment variables and constants.

    Raises:
        ConfigurationError: If REQUEST_TIMEOUT is set but is not a number
    """
    timeout = os.getenv(ENV_VARS['request_timeout'])
    try:
        request_timeout = float(timeout) if timeout else REQUEST_TIMEOUT
    except ValueError as e:
        raise ConfigurationError(ERROR_MESSAGES['invalid_timeout']) from e

    return {
        'github_token': os.getenv(ENV_VARS['github_token']),
        'api_url': os.getenv(ENV_VARS['api_url'], GITHUB_API_URL),
        'request_timeout': request_timeout
    }


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr so they never mix with the table on stdout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser for the -f, -g, -s and -v flags."""
    parser = argparse.ArgumentParser(
        prog="list-repos",
        description="List the GitHub repositories you own, collaborate on, or reach through an organization."
    )
    parser.add_argument("-f", action="store_true", dest="list_fields",
                        help="List the available field names and exit")
    parser.add_argument("-g", metavar="FIELD", dest="group",
                        help="Group repositories by FIELD (case-insensitive)")
    parser.add_argument("-s", action="store_true", dest="sort",
                        help="Sort repositories by name (ignored with -g)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log page-by-page progress to stderr")
    return parser


# =============================================================================
# Main Application Function
# =============================================================================

def run(args: argparse.Namespace, config: Dict[str, Any], console: Console,
        paginator_factory=RepositoryPaginator) -> int:
    """
    Validate flags, fetch all repositories, and print the table and API points.

    Args:
        args: Parsed command line arguments
        config: Application configuration from get_application_config()
        console: Console receiving the table and messages
        paginator_factory: Callable building the paginator from the configuration

    Returns:
        Process exit code
    """
    if args.list_fields:
        print_field_names(console)
        return 0

    try:
        mode = resolve_presentation_mode(group=args.group, sort=args.sort)
        paginator = paginator_factory(
            config['github_token'], api_url=config['api_url'], timeout=config['request_timeout']
        )
    except InvalidFieldError:
        print_error(ERROR_MESSAGES['invalid_field'], console)
        return 1
    except MissingCredentialError as e:
        print_error(str(e), console)
        return 1

    try:
        repositories, usage = paginator.fetch_all()
    except TransportError as e:
        logger.debug("Repository fetch aborted", exc_info=True)
        print_error(str(e), console)
        return 1

    render_table(build_repository_table(repositories, mode), console)
    print_api_points(usage, console)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    console = Console()
    try:
        config = get_application_config()
    except ConfigurationError as e:
        print_error(str(e), console)
        return 1
    return run(args, config, console)


if __name__ == "__main__":
    sys.exit(main())
