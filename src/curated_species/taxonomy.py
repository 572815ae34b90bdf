"""Taxonomy projection from an iNaturalist ancestor chain."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from curated_species.schemas import TaxonAncestor


def get_taxonomy(ancestors: Iterable[TaxonAncestor], ranks: Collection[str]) -> dict[str, str]:
    """
    Map each wanted rank to the ancestor name at that rank.

    Ancestors are walked root to parent; if a rank appears twice the later
    entry wins.

    Args:
        ancestors: Root-to-parent ancestor chain of a taxon.
        ranks: Ranks to keep (e.g. ``{"family", "genus"}``).

    Returns:
        Dict of rank -> ancestor name, in chain order.
    """
    taxonomy: dict[str, str] = {}
    for ancestor in ancestors:
        if ancestor.rank in ranks:
            taxonomy[ancestor.rank] = ancestor.name
    return taxonomy
