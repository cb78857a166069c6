"""
Shared repository types and field helpers for the GitHub repository lister.

This module holds the repository record type and the fixed table of display
fields used by grouping, sorting, and rendering.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from constants import MISSING_BRANCH_PLACEHOLDER, STATUS_SYMBOLS, ERROR_MESSAGES


class InvalidFieldError(ValueError):
    """Raised when a field name does not match any known display field."""

    def __init__(self, field_name: str):
        super().__init__(f"{ERROR_MESSAGES['invalid_field']}: {field_name}")
        self.field_name = field_name


# =============================================================================
# Repository Record
# =============================================================================

@dataclass(frozen=True)
class RepositoryRecord:
    """One repository as returned by the viewer repositories connection."""

    name: str
    owner_login: str
    viewer_permission: str
    default_branch: Optional[str]
    is_private: bool

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "RepositoryRecord":
        """
        Build a record from a GraphQL repository node.

        Args:
            node: Repository node from the GraphQL response

        Returns:
            RepositoryRecord with the fields the lister displays
        """
        branch_ref = node.get("defaultBranchRef")
        return cls(
            name=node["name"],
            owner_login=node["owner"]["login"],
            viewer_permission=node["viewerPermission"],
            default_branch=branch_ref["name"] if branch_ref else None,
            is_private=node["isPrivate"],
        )


# =============================================================================
# Display Fields
# =============================================================================

class FieldSpec(NamedTuple):
    name: str
    extract: Callable[[RepositoryRecord], str]


def get_default_branch_display(record: RepositoryRecord) -> str:
    """Return the default branch name, or a placeholder when the repository has none."""
    return record.default_branch or MISSING_BRANCH_PLACEHOLDER


def get_visibility_symbol(record: RepositoryRecord) -> str:
    """Return the success symbol for public repositories and the error symbol for private ones."""
    return STATUS_SYMBOLS["error"] if record.is_private else STATUS_SYMBOLS["success"]


FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("Repository", lambda record: record.name),
    FieldSpec("Owner", lambda record: record.owner_login),
    FieldSpec("Access", lambda record: record.viewer_permission),
    FieldSpec("DefBranch", get_default_branch_display),
    FieldSpec("isPublic", get_visibility_symbol),
)


def list_field_names() -> List[str]:
    """Return the display field names in column order."""
    return [field.name for field in FIELDS]


def find_field_index(field_name: str) -> int:
    """
    Resolve a field name to its position in FIELDS, ignoring case.

    Args:
        field_name: Field name as typed by the user (e.g. "owner", "OWNER")

    Returns:
        Index of the matching field

    Raises:
        InvalidFieldError: If the name matches none of the known fields
    """
    lowered = field_name.lower()
    for index, field in enumerate(FIELDS):
        if field.name.lower() == lowered:
            return index
    raise InvalidFieldError(field_name)


def find_field(field_name: str) -> FieldSpec:
    """Return the FieldSpec matching field_name, ignoring case."""
    return FIELDS[find_field_index(field_name)]


def extract_row(record: RepositoryRecord) -> List[str]:
    """Extract every display field of a record, in column order."""
    return [field.extract(record) for field in FIELDS]
