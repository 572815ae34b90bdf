"""Curated Species - species list and taxon change ledger from iNaturalist exports.

Architecture::

    schemas.py     Pydantic models for raw observation export pages
    taxonomy.py    Ancestor chain -> rank/name projection
    analysis/      Identification-history resolution (taxon changes, scan, aggregate)
    store.py       Export page reader + enveloped JSON outputs
    flows/         Prefect orchestration (build reads exports, writes derived/)
    config.py      Settings (curators, taxonomy ranks, data directory)

Data flow: exports/ -> store -> analysis -> store -> derived/
"""

__version__ = "0.1.0"

from curated_species.config import Settings
from curated_species.schemas import ExportPage, Observation

__all__ = ["ExportPage", "Observation", "Settings", "__version__"]
