"""
Tests for aggregating export pages into the species list and change ledger.
"""

from __future__ import annotations

from typing import Any

import pytest

from curated_species.analysis import (
    AggregateResult,
    LedgerEntry,
    TaxonChangeEvent,
    UnknownTaxonChangeError,
    aggregate_pages,
    build_change_ledger,
    change_ledger_to_dict,
    get_unique_items,
    species_list_to_dict,
    summarize_species_list,
)
from curated_species.schemas import ExportPage

CURATORS = {"alice", "bob"}
RANKS = {"family"}

ANCESTORS = [{"id": 47922, "name": "Nymphalidae", "rank": "family"}]

# =============================================================================
# Fixtures / Sample export pages
# =============================================================================


def _ident(
    login: str,
    taxon_id: int,
    name: str,
    created_at: str,
    *,
    current: bool = True,
    change: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "user": {"login": login, "id": 1},
        "taxon_id": taxon_id,
        "taxon": {"id": taxon_id, "name": name, "rank": "species", "ancestors": ANCESTORS},
        "current": current,
        "created_at": created_at,
        "taxon_change": change,
    }


def _observation(obs_id: int, identifications: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "id": obs_id,
        "observed_on": "2020-06-01",
        "created_at": "2020-06-02T08:00:00+00:00",
        "user": {"login": f"observer{obs_id}", "name": None, "id": obs_id * 10},
        "identifications": identifications,
        # Extra export keys are ignored
        "quality_grade": "research",
        "photos": [],
    }


def _page(*observations: dict[str, Any]) -> dict[str, Any]:
    return {"total_results": len(observations), "page": 1, "results": list(observations)}


SWAPPED_OBSERVATION = _observation(
    2,
    [
        _ident("alice", 100, "Agriades podarce", "2019-03-01T10:00:00+00:00", current=False),
        _ident(
            "alice",
            200,
            "Plebejus podarce",
            "2021-06-10T14:00:00+00:00",
            change={"id": 55, "type": "TaxonSwap"},
        ),
    ],
)


# =============================================================================
# get_unique_items
# =============================================================================


class TestGetUniqueItems:
    """Test deduplication helper."""

    def test_removes_duplicates_keeping_first_order(self) -> None:
        assert get_unique_items([3, 1, 3, 2, 1]) == [3, 1, 2]

    def test_empty(self) -> None:
        assert get_unique_items([]) == []

    def test_accepts_iterators(self) -> None:
        assert get_unique_items(iter([5, 5])) == [5]


# =============================================================================
# End-to-end scenarios
# =============================================================================


class TestAggregatePages:
    """Test aggregate_pages end to end."""

    def test_single_confirmed_observation(self) -> None:
        """One curator species identification, no change."""
        page = _page(
            _observation(1, [_ident("alice", 48662, "Vanessa cardui", "2020-06-03T09:00:00Z")])
        )

        result = aggregate_pages([page], CURATORS, RANKS)

        assert list(result.species) == [48662]
        records = result.species[48662].observations
        assert len(records) == 1
        assert records[0].confirmation_date == "2020-06-03T09:00:00Z"
        assert result.species[48662].taxonomy == {"family": "Nymphalidae"}
        assert result.change_ledger == {}

    def test_swap_uses_original_date(self) -> None:
        result = aggregate_pages([_page(SWAPPED_OBSERVATION)], CURATORS, RANKS)

        assert list(result.species) == [200]
        record = result.species[200].observations[0]
        assert record.confirmation_date == "2019-03-01T10:00:00+00:00"

    def test_deprecated_taxon_removed_globally(self) -> None:
        """A taxon superseded on one observation is dropped even if another populated it."""
        earlier = _observation(
            1, [_ident("bob", 100, "Agriades podarce", "2018-01-01T00:00:00+00:00")]
        )

        result = aggregate_pages([_page(earlier), _page(SWAPPED_OBSERVATION)], CURATORS, RANKS)

        assert 100 not in result.species
        assert 200 in result.species

    def test_removal_applies_to_earlier_and_later_pages(self) -> None:
        later = _observation(
            3, [_ident("bob", 100, "Agriades podarce", "2022-01-01T00:00:00+00:00")]
        )

        result = aggregate_pages([_page(SWAPPED_OBSERVATION), _page(later)], CURATORS, RANKS)

        assert 100 not in result.species

    def test_change_ledger(self) -> None:
        result = aggregate_pages([_page(SWAPPED_OBSERVATION)], CURATORS, RANKS)

        assert result.change_ledger == {
            2021: {"Agriades podarce": LedgerEntry(new_name="Plebejus podarce", taxon_change_id=55)}
        }

    def test_unknown_change_type_aborts(self) -> None:
        bad = _observation(
            9,
            [
                _ident(
                    "alice",
                    300,
                    "Something",
                    "2021-01-01T00:00:00+00:00",
                    change={"id": 1, "type": "TaxonDrop"},
                )
            ],
        )

        with pytest.raises(UnknownTaxonChangeError):
            aggregate_pages([_page(SWAPPED_OBSERVATION), _page(bad)], CURATORS, RANKS)

    def test_accepts_export_page_models(self) -> None:
        page = ExportPage.model_validate(_page(SWAPPED_OBSERVATION))
        result = aggregate_pages([page], CURATORS, RANKS)
        assert list(result.species) == [200]

    def test_records_accumulate_across_pages(self) -> None:
        pages = [
            _page(_observation(1, [_ident("alice", 5, "Pieris rapae", "2020-01-01T00:00:00Z")])),
            _page(_observation(2, [_ident("bob", 5, "Pieris rapae", "2020-02-01T00:00:00Z")])),
        ]

        result = aggregate_pages(pages, CURATORS, RANKS)

        assert [r.observation_id for r in result.species[5].observations] == [1, 2]
        assert [r.curator for r in result.species[5].observations] == ["alice", "bob"]

    def test_no_pages(self) -> None:
        result = aggregate_pages([], CURATORS, RANKS)
        assert result.species == {}
        assert result.change_ledger == {}

    def test_runs_are_independent(self) -> None:
        first = aggregate_pages([_page(SWAPPED_OBSERVATION)], CURATORS, RANKS)
        second = aggregate_pages([], CURATORS, RANKS)

        assert second.species == {}
        assert second.change_ledger == {}
        assert first.species is not second.species


# =============================================================================
# Change ledger
# =============================================================================


class TestBuildChangeLedger:
    """Test grouping change events by year and previous name."""

    def test_groups_by_year_then_name(self) -> None:
        events = [
            TaxonChangeEvent(1, "A a", "B b", 2020, 10),
            TaxonChangeEvent(2, "C c", "D d", 2020, 11),
            TaxonChangeEvent(3, "E e", "F f", 2022, 12),
        ]

        ledger = build_change_ledger(events)

        assert set(ledger) == {2020, 2022}
        assert set(ledger[2020]) == {"A a", "C c"}
        assert ledger[2022]["E e"] == LedgerEntry(new_name="F f", taxon_change_id=12)

    def test_first_occurrence_wins(self) -> None:
        events = [
            TaxonChangeEvent(1, "A a", "B b", 2020, 10),
            TaxonChangeEvent(2, "A a", "Z z", 2020, 99),
        ]

        ledger = build_change_ledger(events)

        assert ledger == {2020: {"A a": LedgerEntry(new_name="B b", taxon_change_id=10)}}

    def test_same_name_different_years_kept(self) -> None:
        events = [
            TaxonChangeEvent(1, "A a", "B b", 2020, 10),
            TaxonChangeEvent(2, "A a", "C c", 2021, 11),
        ]

        ledger = build_change_ledger(events)

        assert ledger[2020]["A a"].new_name == "B b"
        assert ledger[2021]["A a"].new_name == "C c"


# =============================================================================
# Summary / serialization
# =============================================================================


class TestSummarizeSpeciesList:
    """Test summarize_species_list."""

    def test_empty(self) -> None:
        summary = summarize_species_list(AggregateResult())
        assert summary == {
            "total_species": 0,
            "total_observations": 0,
            "by_curator": {},
            "changes_by_year": {},
        }

    def test_counts(self) -> None:
        pages = [
            _page(
                _observation(1, [_ident("alice", 5, "Pieris rapae", "2020-01-01T00:00:00Z")]),
                _observation(2, [_ident("bob", 5, "Pieris rapae", "2020-02-01T00:00:00Z")]),
                SWAPPED_OBSERVATION,
            )
        ]

        summary = summarize_species_list(aggregate_pages(pages, CURATORS, RANKS))

        assert summary["total_species"] == 2
        assert summary["total_observations"] == 3
        assert summary["by_curator"] == {"alice": 2, "bob": 1}
        assert summary["changes_by_year"] == {2021: 1}


class TestSerialization:
    """Test JSON-ready output payloads."""

    def test_species_list_keys_and_order(self) -> None:
        pages = [
            _page(
                _observation(1, [_ident("alice", 5, "Pieris rapae", "2020-01-01T00:00:00Z")]),
                SWAPPED_OBSERVATION,
            )
        ]

        payload = species_list_to_dict(aggregate_pages(pages, CURATORS, RANKS))

        assert list(payload) == ["5", "200"]
        assert payload["200"]["name"] == "Plebejus podarce"
        assert payload["200"]["observations"][0]["confirmation_date"] == (
            "2019-03-01T10:00:00+00:00"
        )
        assert payload["200"]["taxonomy"] == {"family": "Nymphalidae"}

    def test_change_ledger_payload(self) -> None:
        result = aggregate_pages([_page(SWAPPED_OBSERVATION)], CURATORS, RANKS)

        payload = change_ledger_to_dict(result)

        assert payload == {
            "2021": {"Agriades podarce": {"new_name": "Plebejus podarce", "taxon_change_id": 55}}
        }
