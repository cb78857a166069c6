"""
Repository table presentation.

Turns fetched repository records into a pandas DataFrame according to the
selected presentation mode, and prints tables and API point summaries to the
console with rich.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import pandas as pd
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from constants import REPOSITORY_COLUMN, GROUP_NAME_SEPARATOR, STATUS_SYMBOLS
from github_service_graphql import RateLimitUsage
from utils import FieldSpec, RepositoryRecord, extract_row, find_field, list_field_names


# =============================================================================
# Presentation Modes
# =============================================================================

@dataclass(frozen=True)
class DefaultMode:
    pass


@dataclass(frozen=True)
class SortByNameMode:
    pass


@dataclass(frozen=True)
class GroupByMode:
    field: FieldSpec


PresentationMode = Union[DefaultMode, SortByNameMode, GroupByMode]


def resolve_presentation_mode(group: Optional[str] = None, sort: bool = False) -> PresentationMode:
    """
    Map command line flags to a presentation mode.

    Grouping takes precedence over sorting when both are requested.

    Args:
        group: Field name to group by, matched case-insensitively
        sort: Whether to sort rows by repository name

    Returns:
        The presentation mode to build the table with

    Raises:
        InvalidFieldError: If group names an unknown field
    """
    if group:
        return GroupByMode(find_field(group))
    if sort:
        return SortByNameMode()
    return DefaultMode()


# =============================================================================
# Table Building
# =============================================================================

def sort_by_name(records: List[RepositoryRecord]) -> List[RepositoryRecord]:
    """Return records ordered by case-insensitive repository name."""
    return sorted(records, key=lambda record: record.name.lower())


def group_repository_names(records: List[RepositoryRecord], field: FieldSpec) -> Dict[str, List[str]]:
    """
    Bucket repository names by the display value of field.

    Buckets keep the order in which each key is first seen, and names keep
    fetch order within a bucket.
    """
    groups: Dict[str, List[str]] = {}
    for record in records:
        groups.setdefault(field.extract(record), []).append(record.name)
    return groups


def build_repository_table(records: List[RepositoryRecord],
                           mode: PresentationMode = DefaultMode()) -> pd.DataFrame:
    """
    Build the repository table for the given presentation mode.

    Args:
        records: Repositories in fetch order
        mode: DefaultMode, SortByNameMode or GroupByMode

    Returns:
        DataFrame with one row per repository, or one row per group
    """
    if isinstance(mode, GroupByMode):
        groups = group_repository_names(records, mode.field)
        rows = [[key, GROUP_NAME_SEPARATOR.join(names)] for key, names in groups.items()]
        return pd.DataFrame(rows, columns=[mode.field.name, REPOSITORY_COLUMN])

    if isinstance(mode, SortByNameMode):
        records = sort_by_name(records)

    return pd.DataFrame([extract_row(record) for record in records], columns=list_field_names())


# =============================================================================
# Console Output
# =============================================================================

def render_table(df: pd.DataFrame, console: Console) -> None:
    """Print a DataFrame as a bordered console table."""
    table = Table(show_header=True, header_style="bold red", show_lines=True, box=box.SQUARE)
    for column in df.columns:
        table.add_column(str(column), overflow="fold")
    for row in df.itertuples(index=False):
        table.add_row(*[Text(str(value)) for value in row])
    console.print(table)


def print_field_names(console: Console) -> None:
    """Print each display field name as a list item."""
    for name in list_field_names():
        console.print(f"- {name}", markup=False, highlight=False)


def print_api_points(usage: RateLimitUsage, console: Console) -> None:
    """Print the points spent and left on the GitHub rate limit."""
    console.print(
        f"API Points:\n\tused\t\t-\t{usage.cost}\n\tremaining\t-\t{usage.remaining}",
        markup=False,
        highlight=False,
    )


def print_error(message: str, console: Console) -> None:
    """Print a message prefixed with the error symbol."""
    console.print(f"{STATUS_SYMBOLS['error']} {message}", style="red", markup=False, highlight=False)
