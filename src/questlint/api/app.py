"""FastAPI application exposing quest validation and reference data."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from fastapi import Body, FastAPI, HTTPException
from starlette.middleware.cors import CORSMiddleware

from questlint import __version__
from questlint.checker import check_repository, validate_document
from questlint.config import LintConfig
from questlint.models.quest import MAX_QUEST_ID_LENGTH, QUEST_ID_PATTERN
from questlint.models.references import CATALOG_FILES, EntityKind, ReferenceCatalog
from questlint.observability.logging import get_logger
from questlint.storage.catalog import load_catalog
from questlint.storage.errors import SourceUnavailableError
from questlint.storage.loader import QuestParseError, QuestRepository, parse_quest

log = get_logger(__name__)

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

_QUEST_ID_RE = re.compile(QUEST_ID_PATTERN)


def check_quest_id(quest_id: str) -> str | None:
    """Return a reason the ID is malformed, or None if it is acceptable."""
    if not quest_id:
        return "quest ID cannot be empty"
    if len(quest_id) > MAX_QUEST_ID_LENGTH:
        return f"quest ID exceeds maximum length of {MAX_QUEST_ID_LENGTH} characters"
    if not _QUEST_ID_RE.match(quest_id):
        return (
            "quest ID must start with uppercase letter, followed by alphanumeric, "
            "dots, hyphens, underscores, or colons"
        )
    return None


def create_app(config: LintConfig | None = None) -> FastAPI:
    """Create the API app serving the given repository configuration."""
    settings = config or LintConfig().with_env()

    app = FastAPI(
        title="questlint API",
        version=__version__,
        description="Validation of quest-flow documents against the quest rule set.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=DEV_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def catalog() -> ReferenceCatalog:
        try:
            return load_catalog(settings.data_dir)
        except SourceUnavailableError as exc:
            log.error("catalog_unavailable", data_dir=str(settings.data_dir), error=str(exc))
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    def repository() -> QuestRepository:
        return QuestRepository(settings.quests_dir)

    @app.get("/healthz")
    def healthz() -> dict[str, Any]:
        return {"ok": True}

    @app.post("/api/validate")
    def validate(document: dict[str, Any] = Body(...)) -> dict[str, Any]:
        try:
            quest = parse_quest(document)
        except QuestParseError as exc:
            raise HTTPException(status_code=422, detail=exc.reason) from exc
        return validate_document(quest, catalog(), settings).to_dict()

    @app.post("/api/validate/repository")
    def validate_repository() -> dict[str, Any]:
        try:
            report = check_repository(settings)
        except SourceUnavailableError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return report.to_dict()

    @app.get("/api/quests")
    def list_quests() -> list[str]:
        try:
            return repository().list_ids()
        except SourceUnavailableError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.get("/api/quests/{quest_id}")
    def get_quest(quest_id: str) -> dict[str, Any]:
        if reason := check_quest_id(quest_id):
            raise HTTPException(status_code=400, detail=reason)
        try:
            quest = repository().get(quest_id)
        except SourceUnavailableError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        if quest is None:
            raise HTTPException(status_code=404, detail=f"quest not found: {quest_id}")
        return {"quest": quest.to_document()}

    def catalog_route(kind: EntityKind) -> Callable[[], list[str]]:
        def list_ids() -> list[str]:
            return sorted(catalog().ids(kind))

        return list_ids

    for kind, (filename, _id_key) in CATALOG_FILES.items():
        resource = filename.removesuffix(".yaml")
        app.add_api_route(
            f"/api/{resource}",
            catalog_route(kind),
            methods=["GET"],
            name=f"list_{resource}",
        )

    return app
