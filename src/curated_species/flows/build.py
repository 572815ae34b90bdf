"""
Prefect flow for building the curated species list from export pages.

Reads paginated observation exports from the store, resolves each
observation's curator confirmation, and writes the species list and taxon
change ledger to ``derived/``.

Run locally:
    python -m curated_species.flows.build
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from prefect import flow, task

from curated_species.analysis import (
    AggregateResult,
    aggregate_pages,
    change_ledger_to_dict,
    species_list_to_dict,
    summarize_species_list,
)
from curated_species.config import get_settings
from curated_species.store import DataStore

store = DataStore(get_settings().data_dir)

# Relative output paths within the store
SPECIES_PATH = Path("derived/species.json")
CHANGE_LEDGER_PATH = Path("derived/taxon_changes.json")


# =============================================================================
# Tasks
# =============================================================================


@task(name="load-export-pages")
def load_export_pages(exports_dir: Path | None = None) -> list[dict[str, Any]]:
    """Load every export page, in page order."""
    return [store.read_page(path) for path in store.list_pages(exports_dir)]


@task(name="aggregate-species")
def aggregate_species(
    pages: list[dict[str, Any]],
    curators: list[str],
    taxonomy_ranks: list[str],
) -> AggregateResult:
    """Resolve curator confirmations across all pages."""
    return aggregate_pages(pages, set(curators), set(taxonomy_ranks))


@task(name="save-species-list")
def save_species_list(
    result: AggregateResult,
    curators: list[str],
    page_count: int,
) -> Path:
    """Save the species list via store."""
    return store.write(
        SPECIES_PATH,
        species_list_to_dict(result),
        source=f"observation exports ({page_count} pages)",
        curators=sorted(curators),
    )


@task(name="save-change-ledger")
def save_change_ledger(result: AggregateResult, page_count: int) -> Path:
    """Save the taxon change ledger via store."""
    return store.write(
        CHANGE_LEDGER_PATH,
        change_ledger_to_dict(result),
        source=f"observation exports ({page_count} pages)",
    )


# =============================================================================
# Flow
# =============================================================================


@flow(name="build-species-list", log_prints=True)
def build_species_list(
    curators: list[str] | None = None,
    taxonomy_ranks: list[str] | None = None,
    exports_dir: Path | None = None,
) -> dict[str, Any]:
    """
    Build the species list and taxon change ledger.

    Curators and taxonomy ranks default to the application settings. Nothing
    is written unless every page aggregates cleanly.
    """
    settings = get_settings()
    curators = curators if curators is not None else settings.curators
    taxonomy_ranks = taxonomy_ranks if taxonomy_ranks is not None else settings.taxonomy_ranks

    if not curators:
        print("No curators configured. Nothing to confirm observations against.")
        return {"error": "no curators"}

    print("Loading export pages...")
    pages = load_export_pages(exports_dir)
    if not pages:
        print("No export pages found.")
        return {"error": "no data"}

    total = sum(len(page.get("results", [])) for page in pages)
    print(f"Processing {total:,} observations from {len(pages)} pages...")
    result = aggregate_species(pages, curators, taxonomy_ranks)

    species_path = save_species_list(result, curators, len(pages))
    ledger_path = save_change_ledger(result, len(pages))

    summary = summarize_species_list(result)
    print(f"Saved {summary['total_species']:,} species to {species_path}")
    print(f"Saved taxon change ledger to {ledger_path}")

    return {
        **summary,
        "pages": len(pages),
        "species_output": str(species_path),
        "ledger_output": str(ledger_path),
    }


if __name__ == "__main__":
    result = build_species_list()
    print(f"Flow complete: {result}")
