"""Core enums, domain models and errors for Article Harvester."""
