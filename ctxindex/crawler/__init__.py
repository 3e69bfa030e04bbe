"""Documentation website crawling."""

from .crawler import DocumentationCrawler, extract_links, extract_page_apis
from .profiles import GENERIC_PROFILE, SITE_PROFILES, SiteProfile, select_profile

__all__ = [
    "DocumentationCrawler",
    "GENERIC_PROFILE",
    "SITE_PROFILES",
    "SiteProfile",
    "extract_links",
    "extract_page_apis",
    "select_profile",
]
