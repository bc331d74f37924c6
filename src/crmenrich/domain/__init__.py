"""Domain layer: CRM records, enrichment services and ports."""
