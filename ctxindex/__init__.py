"""Condensed context index builder for hosted software repositories."""

from .models import ApiSignature, DocumentationSource, FetchedFile, RepositoryProfile

__all__ = ["ApiSignature", "DocumentationSource", "FetchedFile", "RepositoryProfile", "__version__"]

__version__ = "0.1.0"
