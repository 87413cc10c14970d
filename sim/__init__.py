"""League-level helpers: roster ingestion and concurrent game dispatch."""
