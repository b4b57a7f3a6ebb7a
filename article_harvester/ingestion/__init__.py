"""
Article Harvester Ingestion Pipeline
====================================

This package discovers, classifies and extracts articles from a single
WordPress-themed origin.

Pipeline Stages:
1. Crawl - Frontier fetches Pending links and queues same-origin anchors
2. Classify - Visited links become File, Tag, Category or Article by href shape
3. Taxonomy - Tag and Category links become taxonomy rows
4. Extract - Article pages are parsed into articles and comments
5. Persist - Runners store articles with their taxonomy links and comments
"""

from article_harvester.ingestion.site_config import (
    ClassificationPatterns,
    SiteConfig,
    get_default_config,
    load_config,
    reset_default_config,
)
from article_harvester.ingestion.normalizer import (
    is_file_link,
    is_same_origin,
    name_from_slug,
    normalize_url,
    slugify,
)
from article_harvester.ingestion.crawler import (
    Fetcher,
    FetchResult,
    PageFetcher,
    extract_links,
)
from article_harvester.ingestion.frontier import (
    Frontier,
    LinkCrawler,
    maintain,
)
from article_harvester.ingestion.classifier import LinkClassifier
from article_harvester.ingestion.taxonomy import TaxonomyClassifier, TaxonomyReport
from article_harvester.ingestion.extractor import ContentExtractor, Extraction
from article_harvester.ingestion.runners import (
    ArticleWriter,
    BatchRunner,
    SingleLinkRunner,
)

__all__ = [
    # Configuration
    "ClassificationPatterns",
    "SiteConfig",
    "get_default_config",
    "load_config",
    "reset_default_config",
    # Normalizer
    "is_file_link",
    "is_same_origin",
    "name_from_slug",
    "normalize_url",
    "slugify",
    # Fetcher
    "Fetcher",
    "FetchResult",
    "PageFetcher",
    "extract_links",
    # Frontier
    "Frontier",
    "LinkCrawler",
    "maintain",
    # Classification
    "LinkClassifier",
    "TaxonomyClassifier",
    "TaxonomyReport",
    # Extraction
    "ContentExtractor",
    "Extraction",
    # Runners
    "ArticleWriter",
    "BatchRunner",
    "SingleLinkRunner",
]
