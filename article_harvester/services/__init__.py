"""Application services for Article Harvester."""

from article_harvester.services.export_service import LinkExportService

__all__ = ["LinkExportService"]
