"""Article Harvester - incremental crawl and extraction of a WordPress-themed archive."""

__version__ = "0.1.0"
