"""Confirmation dates corrected for taxon swaps, splits and merges.

When iNaturalist applies a taxon change, every affected identification is
re-issued under the new taxon with a fresh ``created_at``. The curator's
*original* confirmation is therefore hidden behind one or more change
identifications. This module walks a curator's identification history
backward to recover it, and reports every taxon id that the chain superseded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from curated_species.schemas import TaxonChangeType

if TYPE_CHECKING:
    from collections.abc import Sequence

    from curated_species.schemas import Identification

logger = logging.getLogger(__name__)

KNOWN_CHANGE_TYPES = frozenset(t.value for t in TaxonChangeType)


class UnknownTaxonChangeError(ValueError):
    """A taxon change carries a type tag we don't know how to follow."""

    def __init__(self, observation_id: int, change_type: str) -> None:
        super().__init__(observation_id, change_type)
        self.observation_id = observation_id
        self.change_type = change_type

    def __str__(self) -> str:
        return (
            f"Unknown taxon change type {self.change_type!r} "
            f"on observation {self.observation_id}"
        )


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class TaxonChangeEvent:
    """One step of a taxon change chain, as seen on a single observation."""

    observation_id: int
    previous_name: str
    new_name: str
    year_changed: int
    taxon_change_id: int


@dataclass
class ConfirmationResolution:
    """Result of following a curator identification back through taxon changes."""

    original_confirmation_date: str
    deprecated_taxon_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class _CuratorIdentification:
    taxon_id: int
    confirmation_date: str
    is_taxon_change: bool


# =============================================================================
# Date helpers
# =============================================================================


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def to_epoch_ms(value: str) -> int:
    """Convert an ISO 8601 timestamp to epoch milliseconds."""
    return int(parse_timestamp(value).timestamp() * 1000)


# =============================================================================
# Resolver
# =============================================================================


def resolve_confirmation_date(
    identifications: Sequence[Identification],
    curator_index: int,
    observation_id: int,
    change_events: list[TaxonChangeEvent],
) -> ConfirmationResolution:
    """
    Find when the curator at *curator_index* originally confirmed the record.

    If that identification is not the product of a taxon change, its own
    ``created_at`` is the answer. Otherwise the curator's earlier
    identifications are walked newest to oldest: each one visited emits a
    ``TaxonChangeEvent`` into *change_events*, and each one before the first
    non-change identification has its taxon id reported as deprecated.

    Args:
        identifications: The observation's identifications, oldest first.
        curator_index: Index of the qualifying curator identification.
        observation_id: Observation the identifications belong to.
        change_events: Collector that receives the emitted change events.

    Returns:
        ConfirmationResolution with the original date and deprecated taxon ids.

    Raises:
        UnknownTaxonChangeError: The change type is not swap, split or merge.
    """
    confirmation = identifications[curator_index]
    if confirmation.taxon_change is None:
        return ConfirmationResolution(original_confirmation_date=confirmation.created_at)

    if confirmation.taxon_change.type not in KNOWN_CHANGE_TYPES:
        raise UnknownTaxonChangeError(observation_id, confirmation.taxon_change.type)

    curator = confirmation.user.login
    # Only ever points at change identifications.
    last_change = confirmation
    last_change_id = confirmation.taxon_change.id
    history: list[_CuratorIdentification] = []

    for i in range(curator_index, -1, -1):
        ident = identifications[i]
        if ident.user.login != curator:
            continue

        if i != curator_index:
            change_events.append(
                TaxonChangeEvent(
                    observation_id=observation_id,
                    previous_name=ident.taxon.name,
                    new_name=last_change.taxon.name,
                    year_changed=parse_timestamp(last_change.created_at).year,
                    taxon_change_id=last_change_id,
                )
            )
            if ident.taxon_change is not None:
                last_change = ident
                last_change_id = ident.taxon_change.id

        history.append(
            _CuratorIdentification(
                taxon_id=ident.taxon_id,
                confirmation_date=ident.created_at,
                is_taxon_change=ident.taxon_change is not None,
            )
        )

    # The first non-change identification is the original confirmation; any
    # older ones by the same curator don't matter.
    deprecated_taxon_ids: list[int] = []
    original_date: str | None = None
    for i, entry in enumerate(history):
        if i != 0:
            deprecated_taxon_ids.append(entry.taxon_id)
        if not entry.is_taxon_change:
            original_date = entry.confirmation_date
            break

    if original_date is None:
        original_date = history[-1].confirmation_date
        logger.warning(
            "Observation %s: no pre-change identification by %s, using %s",
            observation_id,
            curator,
            original_date,
        )

    return ConfirmationResolution(
        original_confirmation_date=original_date,
        deprecated_taxon_ids=deprecated_taxon_ids,
    )
