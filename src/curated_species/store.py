"""Data store for observation exports and generated outputs.

Two directories under a base:
  - exports/: Raw paginated observation exports (``page-1.json``, ...),
    written by whatever fetched them. Read as-is.
  - derived/: Computed outputs (species list, taxon change ledger), always
    regenerated.

Every output JSON file is wrapped in a metadata envelope recording where it
came from and when it was generated.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 — used at runtime, not just annotations
from typing import Any

_PAGE_NUMBER = re.compile(r"(\d+)")


def page_number(path: Path) -> int:
    """Return the last number in a page file name (``page-12.json`` -> 12)."""
    numbers = _PAGE_NUMBER.findall(path.stem)
    if not numbers:
        msg = f"No page number in export file name: {path.name}"
        raise ValueError(msg)
    return int(numbers[-1])


class DataStore:
    """Lists and reads export pages, writes derived output files."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.exports = base_dir / "exports"
        self.derived = base_dir / "derived"

    def list_pages(self, directory: Path | None = None) -> list[Path]:
        """List export page files in page order.

        Pages are ordered by the number in their file name, so ``page-10``
        sorts after ``page-9``. JSON files without a number in their name
        (``manifest.json``) are not pages and are skipped. Returns an empty
        list if the directory is missing.

        Args:
            directory: Directory holding the page files. Defaults to
                ``exports/``.
        """
        folder = directory if directory is not None else self.exports
        if not folder.is_dir():
            return []
        pages = [p for p in folder.glob("*.json") if _PAGE_NUMBER.search(p.stem)]
        return sorted(pages, key=page_number)

    def read_page(self, path: Path) -> dict[str, Any]:
        """Read one raw export page (no envelope)."""
        with path.open() as f:
            page: dict[str, Any] = json.load(f)
        return page

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``derived/species.json``).
            data: Payload to store under the ``data`` key.
            source: Where the data came from (e.g. ``"exports/ (12 pages)"``).
            **params: Extra metadata fields (curators, ranks, ...).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "generated_at": datetime.now(UTC).isoformat(),
        }
        if params:
            meta.update(params)

        envelope = {"meta": meta, "data": data}
        with full.open("w") as f:
            json.dump(envelope, f, indent=2)

        return full

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full
