"""Services Layer — orchestration of cache lookups and upstream fan-out queries."""
