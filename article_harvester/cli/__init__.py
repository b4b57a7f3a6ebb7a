"""Command-line interface for Article Harvester."""
