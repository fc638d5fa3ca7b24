"""
Directory helpers used by the site copier.

A member handler is any callable taking an ``os.DirEntry``. Raising from a
handler stops the enumeration and the exception reaches the caller.
"""

import os
from typing import Callable

MemberHandler = Callable[[os.DirEntry], None]


def for_each_entry(path: str, handler: MemberHandler) -> None:
    """Call ``handler`` for every immediate entry of ``path``, sorted by name."""
    # Read the whole listing first so an unreadable directory fails before
    # the handler sees anything.
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        handler(entry)


def only_files(entry: os.DirEntry, handler: MemberHandler) -> None:
    """Forward ``entry`` to ``handler`` unless it is a directory."""
    if entry.is_dir():
        return
    handler(entry)


def files_only(handler: MemberHandler) -> MemberHandler:
    """Wrap ``handler`` so that ``for_each_entry`` only feeds it files."""
    def filtered(entry):
        only_files(entry, handler)
    return filtered
