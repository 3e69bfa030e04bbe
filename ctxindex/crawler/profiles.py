"""CSS selector profiles for known documentation sites."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlparse


@dataclass(frozen=True)
class SiteProfile:
    """How API entries are laid out on a documentation site."""

    api_path: Optional[str]
    method_selector: str
    signature_selector: str
    description_selector: str
    structure: str

    def wants_link(self, href: str) -> bool:
        if self.api_path is None:
            return bool(_GENERIC_LINK.search(href))
        return self.api_path in href or "api" in href or "reference" in href


_GENERIC_LINK = re.compile(r"api|reference|docs|methods|functions|classes", re.IGNORECASE)

SITE_PROFILES: Dict[str, SiteProfile] = {
    "react.dev": SiteProfile("/reference/react", "h1, h2, h3", "pre code, .code-block", "p", "react-style"),
    "vuejs.org": SiteProfile("/api/", "h2, h3", "pre code", ".api-description, p", "vue-style"),
    "angular.io": SiteProfile("/api", "h1.api-header", "code.api-doc-code", ".api-body", "angular-style"),
    "lodash.com": SiteProfile("/docs", "h3", "pre", ".doc-desc", "lodash-style"),
    "expressjs.com": SiteProfile("/en/api.html", "h2, h3", "pre code", "p", "express-style"),
    "docs.python.org": SiteProfile("/3/library/", "dt.sig", ".sig-prename, .sig-name", "dd", "python-style"),
    "ruby-doc.org": SiteProfile("/core/", ".method-heading", ".method-callseq", ".method-description", "ruby-style"),
    "docs.rs": SiteProfile("/", "h3.code-header", "pre.rust", ".docblock", "rust-style"),
    "pkg.go.dev": SiteProfile("/", "h3.Documentation-typeFunc", "pre", ".Documentation-content p", "go-style"),
    "docs.oracle.com": SiteProfile("/javase/", "h3.method-heading", "pre", ".block", "java-style"),
    "readthedocs.io": SiteProfile("/en/latest/", "dt", ".sig", "dd", "sphinx-style"),
    "developer.mozilla.org": SiteProfile("/en-US/docs/", "h2, h3", "pre.syntaxbox", "p", "mdn-style"),
}

GENERIC_PROFILE = SiteProfile(
    api_path=None,
    method_selector=(
        "h1, h2, h3, .method-name, .function-name, .api-name, [class*=method], [class*=function]"
    ),
    signature_selector=(
        "pre code, pre, code.signature, .method-signature, .function-signature, .api-signature, [class*=signature]"
    ),
    description_selector=".description, .method-description, .api-description, .content p, p",
    structure="generic",
)


def select_profile(url: str) -> SiteProfile:
    """Pick the profile whose domain appears in the URL's host, else the generic one."""
    host = (urlparse(url).hostname or "").lower()
    for domain, profile in SITE_PROFILES.items():
        if domain in host:
            return profile
    return GENERIC_PROFILE


__all__ = ["GENERIC_PROFILE", "SITE_PROFILES", "SiteProfile", "select_profile"]
