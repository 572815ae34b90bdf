"""Per-observation scan for the earliest curator confirmation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from curated_species.analysis.taxon_changes import (
    TaxonChangeEvent,
    resolve_confirmation_date,
    to_epoch_ms,
)
from curated_species.schemas import CONFIRMABLE_RANKS, TaxonRank
from curated_species.taxonomy import get_taxonomy

if TYPE_CHECKING:
    from collections.abc import Collection

    from curated_species.schemas import Observation

logger = logging.getLogger(__name__)

# =============================================================================
# Data Models
# =============================================================================


@dataclass
class ObservationRecord:
    """A curator-confirmed observation of a species."""

    observation_id: int
    observed_on: str | None
    created_at: str
    confirmation_date: str
    confirmation_epoch_ms: int
    curator: str
    observer_login: str
    observer_name: str | None = None
    observer_id: int | None = None


@dataclass
class SpeciesAggregate:
    """All confirmed observations of one species."""

    taxon_id: int
    name: str
    observations: list[ObservationRecord] = field(default_factory=list)
    taxonomy: dict[str, str] | None = None


@dataclass
class Accumulator:
    """State shared across every observation in a single aggregation run."""

    species: dict[int, SpeciesAggregate] = field(default_factory=dict)
    deprecated_taxon_ids: list[int] = field(default_factory=list)
    change_events: list[TaxonChangeEvent] = field(default_factory=list)


# =============================================================================
# Scanner
# =============================================================================


def scan_observation(
    observation: Observation,
    curators: Collection[str],
    taxonomy_ranks: Collection[str],
    acc: Accumulator,
) -> None:
    """
    Record the observation under the species its first curator confirmed.

    Only the earliest current identification by a curator at species or
    subspecies rank counts. Subspecies are folded into their parent species;
    a subspecies without an ancestor chain can't be folded and is skipped.
    """
    taxon_id: int | None = None

    for i, ident in enumerate(observation.identifications):
        if not ident.current or ident.user.login not in curators:
            continue
        if ident.taxon.rank not in CONFIRMABLE_RANKS:
            continue

        if ident.taxon.rank == TaxonRank.SUBSPECIES:
            if not ident.taxon.ancestors:
                logger.warning(
                    "Observation %s: subspecies %s (%s) has no ancestors, skipping",
                    observation.id,
                    ident.taxon.name,
                    ident.taxon.id,
                )
                continue
            parent = ident.taxon.ancestors[-1]
            taxon_id = parent.id
            name = parent.name
        else:
            taxon_id = ident.taxon.id
            name = ident.taxon.name

        species = acc.species.get(taxon_id)
        if species is None:
            species = SpeciesAggregate(taxon_id=taxon_id, name=name)
            acc.species[taxon_id] = species

        resolution = resolve_confirmation_date(
            observation.identifications, i, observation.id, acc.change_events
        )
        acc.deprecated_taxon_ids.extend(resolution.deprecated_taxon_ids)

        species.observations.append(
            ObservationRecord(
                observation_id=observation.id,
                observed_on=observation.observed_on,
                created_at=observation.created_at,
                confirmation_date=resolution.original_confirmation_date,
                confirmation_epoch_ms=to_epoch_ms(resolution.original_confirmation_date),
                curator=ident.user.login,
                observer_login=observation.user.login,
                observer_name=observation.user.name,
                observer_id=observation.user.id,
            )
        )

        if species.taxonomy is None:
            species.taxonomy = get_taxonomy(ident.taxon.ancestors, taxonomy_ranks)
        break

    if taxon_id is not None:
        species = acc.species.get(taxon_id)
        if species is not None and not species.observations:
            del acc.species[taxon_id]
