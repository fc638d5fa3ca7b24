"""
Mirror the top-level files of a source directory into an output directory.

Files whose names start with an underscore are drafts or partials and are
left out, as are subdirectories.
"""

import os
import stat
import logging

from .directory import for_each_entry, files_only


class SiteCopier:
    """Copy every publishable file of ``source_dir`` into ``output_dir``."""

    def __init__(self, source_dir='.', output_dir='_site'):
        self.source_dir = source_dir
        self.output_dir = output_dir
        self.files_copied = 0
        self.logger = logging.getLogger('SiteHammer')

    def output_name_for(self, name):
        """Path in the output directory that mirrors the source file ``name``."""
        return os.path.join(self.output_dir, name)

    def process_source_file(self, entry):
        """Copy one directory entry, keeping its permission bits."""
        if entry.name.startswith('_'):
            self.logger.debug(f"Skipping underscore file: {entry.name}")
            return

        output_name = self.output_name_for(entry.name)
        with open(entry.path, 'rb') as f:
            raw_data = f.read()
        with open(output_name, 'wb') as f:
            f.write(raw_data)
        os.chmod(output_name, stat.S_IMODE(entry.stat().st_mode))

        self.files_copied += 1
        self.logger.debug(f"Copied {entry.path} -> {output_name}")

    def copy(self):
        """Copy the site and return how many files were written."""
        os.makedirs(self.output_dir, exist_ok=True)
        for_each_entry(self.source_dir, files_only(self.process_source_file))
        self.logger.info(f"Total files copied: {self.files_copied}")
        return self.files_copied


def copy_site(source_dir='.', output_dir='_site'):
    """Convenience wrapper around :class:`SiteCopier`."""
    return SiteCopier(source_dir, output_dir).copy()
