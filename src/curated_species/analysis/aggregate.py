"""Fold observation export pages into a species list and taxon change ledger.

The aggregation is a single pass over every observation of every page, in
page order, followed by two clean-up steps:

1. Taxon ids superseded by a taxon change on *any* observation are removed
   from the species list.
2. Change events are grouped by year and by the species name they replaced.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

from curated_species.analysis.scanner import Accumulator, SpeciesAggregate, scan_observation
from curated_species.schemas import ExportPage

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from curated_species.analysis.taxon_changes import TaxonChangeEvent

# =============================================================================
# Data Models
# =============================================================================


@dataclass
class LedgerEntry:
    """What a species name was changed to, and by which taxon change."""

    new_name: str
    taxon_change_id: int


#: year -> previous species name -> entry
ChangeLedger = dict[int, dict[str, LedgerEntry]]


@dataclass
class AggregateResult:
    """The consolidated species list plus the taxon change ledger."""

    species: dict[int, SpeciesAggregate] = field(default_factory=dict)
    change_ledger: ChangeLedger = field(default_factory=dict)


# =============================================================================
# Helpers
# =============================================================================


def get_unique_items(items: Iterable[int]) -> list[int]:
    """Drop repeated items, keeping the first occurrence of each."""
    return list(dict.fromkeys(items))


def build_change_ledger(events: Iterable[TaxonChangeEvent]) -> ChangeLedger:
    """
    Group change events by year, then by the species name they replaced.

    When the same (year, previous name) pair shows up more than once, the
    first event wins.
    """
    ledger: ChangeLedger = {}
    for event in events:
        by_name = ledger.setdefault(event.year_changed, {})
        if event.previous_name in by_name:
            continue
        by_name[event.previous_name] = LedgerEntry(
            new_name=event.new_name,
            taxon_change_id=event.taxon_change_id,
        )
    return ledger


# =============================================================================
# Aggregation
# =============================================================================


def aggregate_pages(
    pages: Iterable[ExportPage | Mapping[str, Any]],
    curators: Collection[str],
    taxonomy_ranks: Collection[str],
) -> AggregateResult:
    """
    Build the curated species list from observation export pages.

    Args:
        pages: Export pages in page order, as ``ExportPage`` models or the raw
            decoded JSON (a dict with a ``results`` list).
        curators: Logins whose identifications count as confirmation.
        taxonomy_ranks: Ranks to keep in each species' taxonomy.

    Returns:
        AggregateResult keyed by species taxon id.

    Raises:
        UnknownTaxonChangeError: An observation carries an unrecognized
            taxon change type. Nothing is returned in that case.
    """
    acc = Accumulator()

    for page in pages:
        export = page if isinstance(page, ExportPage) else ExportPage.model_validate(page)
        for observation in export.results:
            scan_observation(observation, curators, taxonomy_ranks, acc)

    for taxon_id in get_unique_items(acc.deprecated_taxon_ids):
        acc.species.pop(taxon_id, None)

    return AggregateResult(
        species=acc.species,
        change_ledger=build_change_ledger(acc.change_events),
    )


# =============================================================================
# Analysis / Summary
# =============================================================================


def summarize_species_list(result: AggregateResult) -> dict[str, Any]:
    """
    Create a summary of the species list for reporting.

    Returns dict with species/observation totals, confirmations per curator,
    and the number of taxon changes recorded per year.
    """
    by_curator: Counter[str] = Counter()
    total_observations = 0
    for species in result.species.values():
        total_observations += len(species.observations)
        by_curator.update(record.curator for record in species.observations)

    return {
        "total_species": len(result.species),
        "total_observations": total_observations,
        "by_curator": dict(by_curator.most_common()),
        "changes_by_year": {
            year: len(changes) for year, changes in sorted(result.change_ledger.items())
        },
    }


def species_list_to_dict(result: AggregateResult) -> dict[str, Any]:
    """Serialize the species list, keyed by taxon id (as string), sorted by name."""
    ordered = sorted(result.species.values(), key=lambda s: s.name)
    return {str(species.taxon_id): asdict(species) for species in ordered}


def change_ledger_to_dict(result: AggregateResult) -> dict[str, Any]:
    """Serialize the change ledger with years as string keys, oldest first."""
    return {
        str(year): {name: asdict(entry) for name, entry in changes.items()}
        for year, changes in sorted(result.change_ledger.items())
    }
