"""Route modules for the Article Harvester API."""
