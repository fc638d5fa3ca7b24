"""Tests for ArticleStore and ArticleData."""

import pytest
import os
from markupsafe import Markup

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sitehammer.core import ArticleStore, ArticleData, Descriptor
from sitehammer.exceptions import ContentError


class TestArticleStore:
    """Test cases for ArticleStore."""

    def test_reads_abstract_and_body(self, site_dir, add_article):
        add_article(3, abstract='<p>short</p>', body='<p>long</p>')
        store = ArticleStore(str(site_dir / 'src'))

        assert store.abstract_for(3) == '<p>short</p>'
        assert store.body_for(3) == '<p>long</p>'

    def test_missing_body_is_not_an_error(self, site_dir, add_article):
        add_article(3, abstract='hi')
        store = ArticleStore(str(site_dir / 'src'), strict=True)

        assert store.body_for(3) is None

    def test_empty_body_is_present(self, site_dir, add_article):
        add_article(3, abstract='hi', body='')
        store = ArticleStore(str(site_dir / 'src'))

        article = store.article_for(Descriptor(3, 'T', 'A', 'P'))

        assert article.body == ''
        assert article.has_body

    def test_missing_abstract_lenient(self, site_dir):
        """Without strict mode a missing abstract reads as empty."""
        store = ArticleStore(str(site_dir / 'src'))
        assert store.abstract_for(99) == ''

    def test_missing_abstract_strict(self, site_dir):
        store = ArticleStore(str(site_dir / 'src'), strict=True)

        with pytest.raises(ContentError, match="Article ID 99") as exc_info:
            store.abstract_for(99)

        assert exc_info.value.article_id == 99

    @pytest.mark.parametrize('strict', [False, True])
    def test_non_utf8_content_passes_through(self, site_dir, add_article, strict):
        """Undecodable bytes are replaced instead of aborting the build."""
        article_src = add_article(1)
        (article_src / 'abstract').write_bytes(b'caf\xe9')
        (article_src / 'body').write_bytes(b'na\xefve')
        store = ArticleStore(str(site_dir / 'src'), strict=strict)

        assert store.abstract_for(1) == 'caf\ufffd'
        assert store.body_for(1) == 'na\ufffdve'

    def test_input_filename_for(self):
        store = ArticleStore('src')
        assert store.input_filename_for(1024, 'abstract') == os.path.join('src', '1024', 'abstract')

    def test_load_articles_keeps_input_order(self, site_dir, add_article):
        for article_id in (5, 1, 3):
            add_article(article_id, abstract=f'abstract {article_id}')
        store = ArticleStore(str(site_dir / 'src'))

        articles = store.load_articles([Descriptor(i, 'T', 'A', 'P') for i in (5, 1, 3)])

        assert [a.id for a in articles] == [5, 1, 3]
        assert [a.abstract for a in articles] == ['abstract 5', 'abstract 1', 'abstract 3']


class TestArticleData:
    """Test cases for ArticleData."""

    def test_exposes_descriptor_fields(self):
        article = ArticleData(Descriptor(1, 'Title', 'Author', '2020', 'a@example.com'), 'abs')

        assert article.id == 1
        assert article.title == 'Title'
        assert article.author == 'Author'
        assert article.published == '2020'
        assert article.email == 'a@example.com'
        assert not article.has_body

    def test_content_is_markup(self):
        """Fragments are trusted markup and must not be escaped by templates."""
        article = ArticleData(Descriptor(1, 'T', 'A', 'P'), '<b>a</b>', '<i>b</i>')

        assert isinstance(article.abstract, Markup)
        assert isinstance(article.body, Markup)
        assert str(article.abstract) == '<b>a</b>'
