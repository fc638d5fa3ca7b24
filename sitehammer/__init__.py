"""
SiteHammer - a minimal static site and blog generator.

SiteHammer renders blog articles described in a JSON descriptor file into
Jinja2 templates, publishes a front page listing the most recent articles,
and mirrors the top-level files of a site into an output directory.
"""

__version__ = "1.0.0"

from .core import BlogGenerator, ArticleStore, Descriptor, ArticleData, load_descriptors, validate_descriptors
from .copier import SiteCopier, copy_site

__all__ = [
    'BlogGenerator', 'ArticleStore', 'Descriptor', 'ArticleData',
    'load_descriptors', 'validate_descriptors', 'SiteCopier', 'copy_site',
]
