from __future__ import annotations

import hashlib
import os
import re
import tempfile
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .configmanager import ConfigManager
from .models import ID_PREFIX

logger = ConfigManager.get_logger(__name__)

ENTITY_FILE_SUFFIX = ".yaml"
MAX_FILENAME_LEN = 255


def sanitize_filename(value: str) -> str:
    value = (value or "").strip()
    if not value:
        return "item"
    value = value.replace(" ", "_")
    value = re.sub(r"[^A-Za-z0-9._-]+", "_", value)
    value = re.sub(r"_+", "_", value).strip("._-")
    return value or "item"


def entity_filename(entity_id: str) -> str:
    name = sanitize_filename(entity_id)
    if len(name) + len(ENTITY_FILE_SUFFIX) > MAX_FILENAME_LEN:
        # Long hosts keep a readable head plus a digest of the full id.
        digest = hashlib.sha256(entity_id.encode("utf-8")).hexdigest()[:16]
        name = name[: MAX_FILENAME_LEN - len(ENTITY_FILE_SUFFIX) - len(digest) - 1] + "-" + digest
    return name + ENTITY_FILE_SUFFIX


def dumps_deterministic(data: Any) -> str:
    # Stable across runs: sorted keys, block style, newline at EOF.
    return (
        yaml.safe_dump(
            data,
            allow_unicode=True,
            sort_keys=True,
            default_flow_style=False,
        )
        or ""
    )


def atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        Path(tmp_path).replace(path)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def write_yaml_file(path: Path, payload: Any, *, skip_unchanged: bool) -> bool:
    """Returns True if wrote/updated the file."""
    content = dumps_deterministic(payload)
    if skip_unchanged and path.is_file():
        if path.read_text(encoding="utf-8") == content:
            return False
    atomic_write_text(path, content)
    return True


def write_entities(
    out_dir: Path,
    entities: Sequence[tuple[str, Mapping[str, Any]]],
    *,
    skip_unchanged: bool = True,
) -> tuple[list[Path], int]:
    """Write one file per entity; returns (all paths, number actually written).

    An entity whose filename is already taken by an earlier one is skipped.
    """
    paths: list[Path] = []
    owners: dict[Path, str] = {}
    wrote = 0
    for entity_id, value in entities:
        path = out_dir / entity_filename(entity_id)
        if path in owners:
            logger.warning("Skipping %r: file %s already holds %r", entity_id, path.name, owners[path])
            continue
        owners[path] = entity_id
        if write_yaml_file(path, dict(value), skip_unchanged=skip_unchanged):
            wrote += 1
            logger.debug("Wrote %s", path)
        paths.append(path)
    return paths, wrote


def prune_stale(out_dir: Path, keep: Iterable[Path]) -> list[Path]:
    """Delete entity files of this source that are not in `keep`."""
    keep_set = {p.resolve() for p in keep}
    prefix = sanitize_filename(ID_PREFIX)
    removed: list[Path] = []
    if not out_dir.is_dir():
        return removed
    for path in sorted(out_dir.glob(f"{prefix}_*{ENTITY_FILE_SUFFIX}")):
        if path.resolve() in keep_set:
            continue
        path.unlink()
        logger.info("Removed stale entity file %s", path)
        removed.append(path)
    return removed
