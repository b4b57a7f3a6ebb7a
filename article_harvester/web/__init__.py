"""HTTP API for Article Harvester."""
