"""Test configuration and fixtures for SiteHammer tests."""

import pytest
import tempfile
import shutil
import json
import logging
from pathlib import Path

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sitehammer.core import BlogGenerator

ARTICLE_TEMPLATE = """<h1>{{ article.title }}</h1>
<p>{{ article.author }} {{ article.published }}</p>
<div class="abstract">{{ article.abstract }}</div>
{% if article.has_body %}<div class="body">{{ article.body }}</div>{% else %}<p>no body</p>{% endif %}
{% if page.has_previous %}<a rel="prev" href="{{ page.url(page.previous_article) }}">prev</a>{% endif %}
{% if page.has_next %}<a rel="next" href="{{ page.url(page.next_article) }}">next</a>{% endif %}
<footer>{{ page.index }}/{{ page.total }}</footer>
"""

INDEX_TEMPLATE = """<ul>
{% for article in articles %}<li data-id="{{ article.id }}"><a href="{{ url_for(article) }}">{{ article.title }}</a></li>
{% endfor %}</ul>
"""


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers added by setup_logging so every test starts clean."""
    yield
    logger = logging.getLogger('SiteHammer')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def site_dir(temp_dir):
    """A site root with src/ and templates/ in place but no articles yet."""
    root = Path(temp_dir)
    (root / 'src').mkdir()
    templates_dir = root / 'templates'
    templates_dir.mkdir()
    (templates_dir / 'blog-article.html').write_text(ARTICLE_TEMPLATE)
    (templates_dir / 'blog-index.html').write_text(INDEX_TEMPLATE)
    return root


@pytest.fixture
def add_article(site_dir):
    """Write the abstract and, optionally, the body of one article."""
    def add(article_id, abstract=None, body=None):
        article_src = site_dir / 'src' / str(article_id)
        article_src.mkdir(parents=True, exist_ok=True)
        if abstract is not None:
            (article_src / 'abstract').write_text(abstract)
        if body is not None:
            (article_src / 'body').write_text(body)
        return article_src
    return add


@pytest.fixture
def write_descriptors(site_dir):
    """Write a descriptor list to src/descriptors.json and return its path."""
    def write(descriptors):
        path = site_dir / 'src' / 'descriptors.json'
        path.write_text(json.dumps(descriptors))
        return str(path)
    return write


@pytest.fixture
def make_descriptor():
    """Build one raw JSON descriptor with sensible non-empty fields."""
    def make(article_id, title=None, author='Author', published='2020', **extra):
        descriptor = {
            'Id': article_id,
            'Title': title if title is not None else f'Article {article_id}',
            'Author': author,
            'Published': published,
        }
        descriptor.update(extra)
        return descriptor
    return make


@pytest.fixture
def generator(site_dir):
    """A BlogGenerator rooted in the temporary site."""
    return BlogGenerator(
        source_dir=str(site_dir / 'src'),
        templates_dir=str(site_dir / 'templates'),
        article_dir=str(site_dir / 'articles'),
        index_file=str(site_dir / 'index.html'),
    )
