"""
Domain models for iNaturalist observation exports.

Pydantic models for the raw export pages. These define the canonical input
schema - page files are validated into these before analysis. Keys the
exports carry that we don't use (photos, places, flags, ...) are ignored.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

# =============================================================================
# Taxonomy
# =============================================================================


class TaxonRank(StrEnum):
    """Taxonomic rank levels used by iNaturalist."""

    STATE_OF_MATTER = "stateofmatter"
    KINGDOM = "kingdom"
    PHYLUM = "phylum"
    SUBPHYLUM = "subphylum"
    SUPERCLASS = "superclass"
    CLASS = "class"
    SUBCLASS = "subclass"
    INFRACLASS = "infraclass"
    SUPERORDER = "superorder"
    ORDER = "order"
    SUBORDER = "suborder"
    INFRAORDER = "infraorder"
    PARVORDER = "parvorder"
    ZOOSECTION = "zoosection"
    ZOOSUBSECTION = "zoosubsection"
    SUPERFAMILY = "superfamily"
    EPIFAMILY = "epifamily"
    FAMILY = "family"
    SUBFAMILY = "subfamily"
    SUPERTRIBE = "supertribe"
    TRIBE = "tribe"
    SUBTRIBE = "subtribe"
    GENUS = "genus"
    GENUSHYBRID = "genushybrid"
    SUBGENUS = "subgenus"
    SECTION = "section"
    SUBSECTION = "subsection"
    COMPLEX = "complex"
    SPECIES = "species"
    HYBRID = "hybrid"
    SUBSPECIES = "subspecies"
    VARIETY = "variety"
    FORM = "form"
    INFRAHYBRID = "infrahybrid"


#: Ranks at which a curator identification counts as a confirmation.
CONFIRMABLE_RANKS = frozenset({TaxonRank.SPECIES.value, TaxonRank.SUBSPECIES.value})


class TaxonChangeType(StrEnum):
    """Kinds of taxonomic reclassification iNaturalist records."""

    SWAP = "TaxonSwap"
    SPLIT = "TaxonSplit"
    MERGE = "TaxonMerge"


class TaxonAncestor(BaseModel):
    """One entry of a taxon's root-to-parent ancestor chain."""

    id: int
    name: str
    rank: str


class Taxon(BaseModel):
    """The taxon asserted by an identification."""

    id: int
    name: str
    rank: str
    ancestors: list[TaxonAncestor] = Field(default_factory=list)


class TaxonChange(BaseModel):
    """Reclassification event attached to an identification.

    ``type`` is kept as a plain string so an unrecognized tag reaches the
    resolver, which treats it as a fatal error rather than a parse failure.
    """

    id: int
    type: str


# =============================================================================
# Observations
# =============================================================================


class User(BaseModel):
    """An iNaturalist account (observer or identifier)."""

    login: str
    id: int | None = None
    name: str | None = None


class Identification(BaseModel):
    """One user's taxon assertion on an observation."""

    user: User
    taxon: Taxon
    taxon_id: int
    current: bool = True
    created_at: str
    taxon_change: TaxonChange | None = None


class Observation(BaseModel):
    """A single exported observation with its identification history.

    ``identifications`` are expected oldest first, as the export API returns
    them.
    """

    id: int
    observed_on: str | None = None
    created_at: str
    user: User
    identifications: list[Identification] = Field(default_factory=list)


class ExportPage(BaseModel):
    """One page of an observation export."""

    results: list[Observation] = Field(default_factory=list)
    page: int | None = None
    per_page: int | None = None
    total_results: int | None = None
