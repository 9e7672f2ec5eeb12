"""Provider client, payload mapping and ingestion jobs."""
