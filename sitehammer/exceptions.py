"""
Exceptions raised by SiteHammer.
"""


class SiteHammerError(Exception):
    """Base class for every error SiteHammer raises on purpose."""


class DescriptorError(SiteHammerError, ValueError):
    """The descriptor file could not be read or decoded."""


class ValidationError(SiteHammerError, ValueError):
    """A descriptor batch broke a required-field or unique-id rule."""

    def __init__(self, message, article_id=None):
        super().__init__(message)
        self.article_id = article_id


class ContentError(SiteHammerError):
    """An article's required source fragment is missing."""

    def __init__(self, message, article_id=None):
        super().__init__(message)
        self.article_id = article_id


class RenderError(SiteHammerError):
    """
    Rendering or writing a page failed.

    ``article_id`` is None when the front page failed. ``cleanup_error`` is set
    when removing the partial article output failed as well.
    """

    def __init__(self, message, article_id=None, cleanup_error=None):
        super().__init__(message)
        self.article_id = article_id
        self.cleanup_error = cleanup_error
