"""Reference catalog loading from the game data directory."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - used at runtime

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from questlint.models.references import CATALOG_FILES, EntityKind, ReferenceCatalog
from questlint.observability.logging import get_logger
from questlint.storage.errors import CatalogLoadError

log = get_logger(__name__)


def load_catalog_ids(kind: EntityKind, path: Path, id_key: str) -> frozenset[str]:
    """Read the IDs of one catalog file.

    The file is a YAML list of mappings; only ``id_key`` is read. A missing
    file yields an empty set. An empty file is an empty catalog.

    Raises:
        CatalogLoadError: If the file exists but cannot be read or has the
            wrong shape.
    """
    if not path.exists():
        log.info("catalog_file_missing", kind=str(kind), path=str(path))
        return frozenset()

    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except (OSError, UnicodeDecodeError, YAMLError) as e:
        raise CatalogLoadError(kind, path, str(e)) from e

    if data is None:
        return frozenset()
    if not isinstance(data, list):
        raise CatalogLoadError(kind, path, "expected a list of entries")

    ids: set[str] = set()
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CatalogLoadError(kind, path, f"entry {index} is not a mapping")
        entity_id = entry.get(id_key)
        if isinstance(entity_id, str) and entity_id:
            ids.add(entity_id)
        else:
            log.debug("catalog_entry_without_id", kind=str(kind), index=index, key=id_key)
    return frozenset(ids)


def load_catalog(data_dir: Path) -> ReferenceCatalog:
    """Load all five catalogs from ``data_dir``.

    Args:
        data_dir: Directory holding ``npcs.yaml``, ``items.yaml`` and friends.

    Returns:
        The reference catalog; kinds without a file are empty.

    Raises:
        CatalogLoadError: If the directory is missing or a catalog file is
            unreadable or malformed.
    """
    if not data_dir.is_dir():
        reason = "not a directory" if data_dir.exists() else "directory not found"
        raise CatalogLoadError(None, data_dir, reason)

    sets = {
        kind: load_catalog_ids(kind, data_dir / filename, id_key)
        for kind, (filename, id_key) in CATALOG_FILES.items()
    }
    catalog = ReferenceCatalog(
        characters=sets[EntityKind.CHARACTER],
        items=sets[EntityKind.ITEM],
        factions=sets[EntityKind.FACTION],
        resources=sets[EntityKind.RESOURCE],
        objects=sets[EntityKind.OBJECT],
    )
    log.debug("catalog_loaded", data_dir=str(data_dir), **{str(k): len(v) for k, v in sets.items()})
    return catalog
