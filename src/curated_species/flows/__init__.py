"""
Prefect flows for the species list pipeline.

Flows:
- build: Aggregate observation export pages into the curated species list
  and taxon change ledger

Usage (local):
    python -m curated_species.flows.build

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    python -m curated_species.flows.build
"""
