"""Repository check: catalog, documents, single-document and cross-document rules.

Quests are validated one after another in load order, so the report is
identical between runs over the same files.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from questlint.graph.cross_validation import validate_repository
from questlint.graph.quest_validation import validate_quest
from questlint.graph.validation_types import RepositoryReport, ValidationResult
from questlint.observability.logging import get_logger, quest_context
from questlint.storage.catalog import load_catalog
from questlint.storage.loader import QuestRepository

if TYPE_CHECKING:
    from questlint.config import LintConfig
    from questlint.models.quest import Quest
    from questlint.models.references import ReferenceCatalog

log = get_logger(__name__)


def validate_document(
    quest: Quest, catalog: ReferenceCatalog | None, config: LintConfig
) -> ValidationResult:
    """Run the single-document checks with the options from ``config``."""
    return validate_quest(
        quest,
        catalog,
        journal_checks=config.journal_checks,
        player_speaker=config.player_speaker,
    )


def check_quests(
    quests: list[Quest], catalog: ReferenceCatalog | None, config: LintConfig
) -> RepositoryReport:
    """Validate already-loaded quests and merge everything into one report."""
    report = RepositoryReport(quests_checked=len(quests))
    for quest in quests:
        with quest_context(quest.quest_id, quest.source):
            result = validate_document(quest, catalog, config)
        report.quest_issues.extend(issue.for_quest(quest.quest_id) for issue in result.issues)
    report.cross_issues.extend(validate_repository(quests, locales=config.locales))
    return report


def check_repository(config: LintConfig) -> RepositoryReport:
    """Load the catalog and every quest document, then run all rules.

    Args:
        config: Directories and validation options.

    Returns:
        RepositoryReport with load failures, per-quest issues and
        cross-document issues.

    Raises:
        CatalogLoadError: If the reference data cannot be loaded.
        QuestSourceError: If the quests directory cannot be read.
    """
    catalog = load_catalog(config.data_dir)
    loaded = QuestRepository(config.quests_dir).load_all()

    report = check_quests(loaded.quests, catalog, config)
    report.load_failures.extend(loaded.failures)

    log.info(
        "repository_checked",
        quests=report.quests_checked,
        load_failures=len(report.load_failures),
        issues=report.issue_count,
    )
    return report
