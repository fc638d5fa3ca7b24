import os
import json
import shutil
import logging
from datetime import datetime
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from .exceptions import DescriptorError, ValidationError, ContentError, RenderError

# Number of articles listed on the front page unless configured otherwise.
DEFAULT_INDEX_SIZE = 5

# Suffix of the temporary file the new front page is written to before it
# replaces the live one.
IN_PROGRESS_SUFFIX = '.inprogress'


class Descriptor:
    """
    Metadata for one blog article, as found in the descriptor file.

    ``id`` names the article's source and output directories and must be
    unique in a batch. ``title``, ``author`` and ``published`` only matter to
    the templates but must not be empty. ``email`` is optional.
    """

    TEXT_FIELDS = (('Title', 'title'), ('Author', 'author'), ('Published', 'published'), ('Email', 'email'))

    def __init__(self, id, title='', author='', published='', email=''):
        self.id = id
        self.title = title
        self.author = author
        self.published = published
        self.email = email

    @classmethod
    def from_dict(cls, raw):
        """Build a descriptor from one decoded JSON object."""
        if not isinstance(raw, dict):
            raise DescriptorError(f"Article descriptor must be a JSON object, got {type(raw).__name__}")

        # Keys match case-insensitively, an exact match wins.
        folded = {}
        for key, value in raw.items():
            folded.setdefault(key.lower(), value)
        for key in ('Id',) + tuple(k for k, _ in cls.TEXT_FIELDS):
            if key in raw:
                folded[key.lower()] = raw[key]

        article_id = folded.get('id', 0)
        if isinstance(article_id, bool) or not isinstance(article_id, int):
            raise DescriptorError(f"Article ID must be an integer, got {article_id!r}")
        if article_id < 0:
            raise DescriptorError(f"Article ID must not be negative, got {article_id}")

        fields = {}
        for key, attr in cls.TEXT_FIELDS:
            value = folded.get(key.lower())
            if value is None:
                value = ''
            if not isinstance(value, str):
                raise DescriptorError(f"Article ID {article_id} has a non-string {key}: {value!r}")
            fields[attr] = value

        return cls(article_id, **fields)

    def __eq__(self, other):
        if not isinstance(other, Descriptor):
            return NotImplemented
        return (self.id, self.title, self.author, self.published, self.email) == \
            (other.id, other.title, other.author, other.published, other.email)

    def __repr__(self):
        return f"Descriptor(id={self.id!r}, title={self.title!r})"


class ArticleData:
    """A descriptor together with the article's abstract and optional body."""

    def __init__(self, descriptor, abstract='', body=None):
        self.descriptor = descriptor
        self.abstract = Markup(abstract)
        self.body = None if body is None else Markup(body)

    @property
    def id(self):
        return self.descriptor.id

    @property
    def title(self):
        return self.descriptor.title

    @property
    def author(self):
        return self.descriptor.author

    @property
    def published(self):
        return self.descriptor.published

    @property
    def email(self):
        return self.descriptor.email

    @property
    def has_body(self):
        """True when a body file exists, even if it is empty."""
        return self.body is not None

    def __repr__(self):
        return f"ArticleData(id={self.id!r}, has_body={self.has_body})"


def load_descriptors(path):
    """Read a JSON array of article descriptors from ``path``."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise DescriptorError(f"Invalid JSON in descriptor file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise DescriptorError(f"Descriptor file {path} is not valid UTF-8: {e}") from e
    except (IOError, OSError) as e:
        raise DescriptorError(f"Error reading descriptor file {path}: {e}") from e

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DescriptorError(f"Descriptor file {path} must contain a JSON array")
    return [Descriptor.from_dict(item) for item in raw]


def validate_descriptors(descriptors):
    """
    Sanity check a batch of descriptors.

    Raises ValidationError for the first descriptor whose title, author or
    published field is empty, or which shares its id with a later descriptor.
    Required fields of a descriptor are checked before its duplicate scan.
    """
    for i, d in enumerate(descriptors):
        if not d.title:
            raise ValidationError(f"Article ID {d.id} has zero-length title.", d.id)
        if not d.author:
            raise ValidationError(f"Article ID {d.id} has zero-length author.", d.id)
        if not d.published:
            raise ValidationError(f"Article ID {d.id} has zero-length publication timestamp.", d.id)

        for e in descriptors[i + 1:]:
            if d.id == e.id:
                raise ValidationError(f"More than one article with ID {d.id}", d.id)


class ArticleStore:
    """
    Look up the source fragments of each article.

    For an article with ID 1234 the abstract lives in ``<source_dir>/1234/abstract``
    and the body in ``<source_dir>/1234/body``. Both are trusted markup.
    With ``strict`` set a missing abstract is an error, otherwise it reads as
    an empty string. A missing body is never an error.
    """

    def __init__(self, source_dir='src', strict=False):
        self.source_dir = source_dir
        self.strict = strict
        self.logger = logging.getLogger('SiteHammer')

    def input_filename_for(self, article_id, kind):
        return os.path.join(self.source_dir, str(article_id), kind)

    def _read(self, path):
        # Fragments pass through as-is; undecodable bytes become U+FFFD.
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            return f.read()

    def abstract_for(self, article_id):
        path = self.input_filename_for(article_id, 'abstract')
        try:
            return self._read(path)
        except (IOError, OSError) as e:
            if self.strict:
                raise ContentError(f"Article ID {article_id} has no readable abstract: {e}", article_id) from e
            self.logger.debug(f"No abstract for article {article_id} at {path}, using an empty one")
            return ''

    def body_for(self, article_id):
        """Return the body text, or None when the article has no body file."""
        path = self.input_filename_for(article_id, 'body')
        try:
            return self._read(path)
        except (IOError, OSError):
            self.logger.debug(f"No body for article {article_id} at {path}")
            return None

    def article_for(self, descriptor):
        return ArticleData(descriptor, self.abstract_for(descriptor.id), self.body_for(descriptor.id))

    def load_articles(self, descriptors):
        """Materialize every descriptor, in input order."""
        return [self.article_for(d) for d in descriptors]


class ArticlePage:
    """
    Everything an article template gets to see about its place on the site.

    ``index`` is the article's position in the input order and ``total`` the
    number of articles rendered in this run.
    """

    def __init__(self, articles, index, site_url='', article_path='articles'):
        self.articles = articles
        self.index = index
        self.total = len(articles)
        self.site_url = site_url
        self.article_path = article_path

    @property
    def article(self):
        return self.articles[self.index]

    @property
    def has_next(self):
        return self.index + 1 < self.total

    @property
    def has_previous(self):
        return self.index > 0

    @property
    def next_article(self):
        return self.articles[self.index + 1] if self.has_next else None

    @property
    def previous_article(self):
        return self.articles[self.index - 1] if self.has_previous else None

    def url(self, article=None):
        """URL of ``article``, or of the current article when omitted."""
        if article is None:
            article = self.article
        return article_url(self.site_url, self.article_path, article.id)


def article_url(site_url, article_path, article_id):
    """Join the site base URL, the article directory and the id into a URL."""
    parts = [site_url.rstrip('/') if site_url else '', article_path.strip('/'), str(article_id)]
    return '/'.join(parts) + '/'


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Site build completed in",
            "Total articles rendered:",
            "Total files copied:",
            "Building index page",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def setup_logging(log_dir=None):
    """
    Set up the ``SiteHammer`` logger.

    The console only shows selected progress messages and warnings. When
    ``log_dir`` is given every record is also written to a timestamped file in it.
    """
    logger = logging.getLogger('SiteHammer')
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.addFilter(InfoFilter())
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            log_filename = datetime.now().strftime('sitehammer_%Y-%m-%d_%H-%M-%S.log')
            file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(file_handler)

    return logger


class BlogGenerator:
    """
    Render blog articles and the front page from descriptors and source fragments.

    Articles go to ``<article_dir>/<id>/index.html``. The front page lists the
    last ``index_size`` articles in input order and is first written to
    ``<index_file>.inprogress``, then renamed over ``index_file``.
    """

    def __init__(self, source_dir='src', templates_dir='templates', article_template='blog-article.html',
                 index_template='blog-index.html', article_dir='articles', index_file='index.html',
                 index_size=DEFAULT_INDEX_SIZE, site_url='', strict=False, log_dir=None):
        self.source_dir = source_dir
        self.templates_dir = templates_dir
        self.article_template = article_template
        self.index_template = index_template
        self.article_dir = article_dir
        self.index_file = index_file
        self.index_in_progress = index_file + IN_PROGRESS_SUFFIX
        self.index_size = max(0, int(index_size))
        self.site_url = site_url or ''
        self.strict = strict
        self.articles_rendered = 0

        self.logger = setup_logging(log_dir)
        self.store = ArticleStore(source_dir, strict=strict)

        # FileSystemLoader caches parsed templates per path and reloads them
        # when the file changes on disk.
        self.env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=select_autoescape(['html', 'htm', 'xml']),
            undefined=StrictUndefined,
        )

    @property
    def article_path(self):
        """URL path segment the article directory is published under."""
        return os.path.basename(os.path.normpath(self.article_dir))

    def url_for(self, article):
        return article_url(self.site_url, self.article_path, article.id)

    def render_template(self, template_name, **context):
        """Render a Jinja2 template. Template errors propagate to the caller."""
        template = self.env.get_template(template_name)
        context.setdefault('site_url', self.site_url)
        context.setdefault('url_for', self.url_for)
        return template.render(**context)

    def output_filename_for(self, article_id, kind=''):
        if kind:
            return os.path.join(self.article_dir, str(article_id), kind)
        return os.path.join(self.article_dir, str(article_id))

    def ensure_is_dir(self, pathname):
        """Create ``pathname`` unless it already exists as a directory."""
        if not os.path.exists(pathname):
            os.mkdir(pathname, 0o755)
            return
        if not os.path.isdir(pathname):
            raise NotADirectoryError(f"Path {pathname} exists, but isn't a directory")

    def ensure_output_directories(self, article_id):
        self.ensure_is_dir(self.article_dir)
        self.ensure_is_dir(self.output_filename_for(article_id))

    def unlink_article(self, article_id):
        """Remove an article's output directory, but not the article directory itself."""
        shutil.rmtree(self.output_filename_for(article_id))

    def emit_article(self, articles, index):
        """
        Render ``articles[index]`` to its own index.html.

        If rendering or writing fails the article's output directory is removed
        so no partial page is left behind, and a RenderError is raised.
        """
        article = articles[index]
        self.ensure_output_directories(article.id)
        output_path = self.output_filename_for(article.id, 'index.html')

        try:
            page = ArticlePage(articles, index, self.site_url, self.article_path)
            html = self.render_template(self.article_template, article=article, page=page)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(html)
        except Exception as e:
            self.logger.error(f"Failed to render article {article.id}: {e}")
            try:
                self.unlink_article(article.id)
            except OSError as cleanup_error:
                raise RenderError(
                    f"Article ID {article.id} failed to render: {e}; "
                    f"removing {self.output_filename_for(article.id)} also failed: {cleanup_error}",
                    article.id, cleanup_error
                ) from e
            raise RenderError(f"Article ID {article.id} failed to render: {e}", article.id) from e

        self.articles_rendered += 1
        self.logger.debug(f"Generated article {article.id} at {output_path}")
        return output_path

    def render_articles(self, articles):
        """Render every article in input order, stopping at the first failure."""
        for index in range(len(articles)):
            self.emit_article(articles, index)

    def most_recent(self, articles):
        """The trailing ``index_size`` articles, in input order."""
        if self.index_size == 0:
            return []
        return articles[-self.index_size:]

    def emit_index(self, articles):
        """Render the front page into the in-progress file and return its path."""
        self.logger.info("Building index page")
        recent = self.most_recent(articles)
        try:
            html = self.render_template(self.index_template, articles=recent, total=len(articles))
        except Exception as e:
            self.logger.error(f"Failed to render index page: {e}")
            raise RenderError(f"Index page failed to render: {e}") from e

        with open(self.index_in_progress, 'w', encoding='utf-8') as f:
            f.write(html)
        return self.index_in_progress

    def promote_index(self):
        """Atomically replace the live front page with the in-progress one."""
        os.replace(self.index_in_progress, self.index_file)
        self.logger.debug(f"Promoted {self.index_in_progress} to {self.index_file}")

    def build(self, descriptor_file):
        """Load, validate, render every article and publish the front page."""
        descriptors = load_descriptors(descriptor_file)
        validate_descriptors(descriptors)
        self.logger.debug(f"Loaded {len(descriptors)} descriptors from {descriptor_file}")

        articles = self.store.load_articles(descriptors)
        self.render_articles(articles)

        self.emit_index(articles)
        self.promote_index()

        self.logger.info(f"Total articles rendered: {self.articles_rendered}")
        return self.articles_rendered
