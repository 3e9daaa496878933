"""Domain layer: payment model, ingestion, canonicalization and reconciliation."""
