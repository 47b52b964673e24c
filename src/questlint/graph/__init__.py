"""Quest graph validation.

Graph utilities, the single-document validator, the cross-document
validator and the result types they share.
"""

from questlint.graph.cross_validation import validate_repository
from questlint.graph.quest_validation import validate_quest
from questlint.graph.validation_types import (
    LoadFailure,
    RepositoryReport,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "LoadFailure",
    "RepositoryReport",
    "ValidationIssue",
    "ValidationResult",
    "validate_quest",
    "validate_repository",
]
