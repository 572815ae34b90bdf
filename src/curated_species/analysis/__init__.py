"""Identification-history analysis: from export pages to a curated species list.

Pure domain logic. Dependency rule: analysis/ imports from ``schemas`` and
``taxonomy`` only. It never reads files and has no Prefect decorators.

Modules (leaves first):
  - taxon_changes: original confirmation date behind taxon swaps/splits/merges
  - scanner: earliest curator confirmation of one observation
  - aggregate: all pages -> species list + taxon change ledger

Every call to ``aggregate_pages`` creates its own ``Accumulator``; nothing is
kept at module level, so runs are independent.
"""

from curated_species.analysis.aggregate import (
    AggregateResult,
    ChangeLedger,
    LedgerEntry,
    aggregate_pages,
    build_change_ledger,
    change_ledger_to_dict,
    get_unique_items,
    species_list_to_dict,
    summarize_species_list,
)
from curated_species.analysis.scanner import (
    Accumulator,
    ObservationRecord,
    SpeciesAggregate,
    scan_observation,
)
from curated_species.analysis.taxon_changes import (
    ConfirmationResolution,
    TaxonChangeEvent,
    UnknownTaxonChangeError,
    resolve_confirmation_date,
)

__all__ = [
    "Accumulator",
    "AggregateResult",
    "ChangeLedger",
    "ConfirmationResolution",
    "LedgerEntry",
    "ObservationRecord",
    "SpeciesAggregate",
    "TaxonChangeEvent",
    "UnknownTaxonChangeError",
    "aggregate_pages",
    "build_change_ledger",
    "change_ledger_to_dict",
    "get_unique_items",
    "resolve_confirmation_date",
    "scan_observation",
    "species_list_to_dict",
    "summarize_species_list",
]
