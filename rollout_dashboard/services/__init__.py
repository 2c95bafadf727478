"""Pipeline services: reconciliation, aggregation, orchestration and presentation."""
