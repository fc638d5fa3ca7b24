#!/usr/bin/env python3
"""
Command-line interface for SiteHammer.

``hammer-blog`` renders blog articles and the front page from a descriptor
file. ``hammer`` mirrors the top-level files of the current directory into
the site output directory.
"""

import os
import sys
import json
import argparse
import time
import shutil
from importlib import resources
from typing import List, Optional
from . import __version__
from .core import BlogGenerator, setup_logging
from .copier import SiteCopier
from .settings import SiteHammerSettings

SAMPLE_DESCRIPTORS = [
    {
        'Id': 1,
        'Title': 'Welcome to SiteHammer',
        'Author': 'Site Author',
        'Published': '2026-10-19',
        'Email': 'author@example.com',
    },
]

SAMPLE_ABSTRACT = "<p>This is the abstract of your first article. It shows up on the front page.</p>\n"

SAMPLE_BODY = """<p>This is the body of your first article.</p>
<p>Abstracts and bodies are plain HTML fragments stored in <code>src/&lt;id&gt;/abstract</code>
and <code>src/&lt;id&gt;/body</code>. The body is optional.</p>
"""


def _write_if_missing(path: str, content: str, label: str) -> None:
    if os.path.exists(path):
        print(f"{label} already exists: {os.path.relpath(path)}")
        return
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    print(f"Created {label.lower()}: {os.path.relpath(path)}")


def create_starter_structure(root: Optional[str] = None) -> None:
    """Create templates, a sample article and a descriptor file under ``root``."""
    root = root or os.getcwd()

    for directory in ['templates', os.path.join('src', '1')]:
        dir_path = os.path.join(root, directory)
        if os.path.exists(dir_path):
            print(f"Directory already exists: {directory}")
        else:
            os.makedirs(dir_path, exist_ok=True)
            print(f"Created directory: {directory}")

    template_source = resources.files('sitehammer') / 'templates'
    for template_file in template_source.iterdir():
        if not template_file.name.endswith('.html'):
            continue
        dest_path = os.path.join(root, 'templates', template_file.name)
        if os.path.exists(dest_path):
            print(f"Template already exists: templates/{template_file.name}")
        else:
            with resources.as_file(template_file) as src_path:
                shutil.copy2(src_path, dest_path)
            print(f"Created template: templates/{template_file.name}")

    _write_if_missing(os.path.join(root, 'src', '1', 'abstract'), SAMPLE_ABSTRACT, 'Abstract')
    _write_if_missing(os.path.join(root, 'src', '1', 'body'), SAMPLE_BODY, 'Body')
    _write_if_missing(os.path.join(root, 'src', 'descriptors.json'),
                      json.dumps(SAMPLE_DESCRIPTORS, indent=2) + "\n", 'Descriptor file')


def blog_main(argv: Optional[List[str]] = None) -> None:
    """Entry point of ``hammer-blog``."""
    parser = argparse.ArgumentParser(description='SiteHammer - render blog articles from a descriptor file')
    parser.add_argument('descriptors', nargs='?',
                        help='JSON file holding an array of article descriptors')
    parser.add_argument('--source', type=str,
                        help='Directory holding <id>/abstract and <id>/body files')
    parser.add_argument('--templates', type=str,
                        help='Templates directory')
    parser.add_argument('--article-dir', type=str,
                        help='Directory articles are rendered into')
    parser.add_argument('--index-file', type=str,
                        help='Front page file to publish')
    parser.add_argument('--index-size', type=int,
                        help='Number of articles listed on the front page')
    parser.add_argument('--site-url', type=str,
                        help='Base URL used to link articles')
    parser.add_argument('--strict', action='store_true', default=None,
                        help='Fail when an article has no abstract')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and starter project')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)

    if args.init:
        settings_loader = SiteHammerSettings()
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        print("\nCreating starter project structure...")
        create_starter_structure()
        print("\nRun 'hammer-blog src/descriptors.json' to build your blog.")
        return

    if not args.descriptors:
        parser.error("You need to specify an article descriptor file.")

    settings_loader = SiteHammerSettings()
    settings_loader.load_settings()

    args_dict = {k: v for k, v in vars(args).items() if v is not None}
    final_settings = settings_loader.merge_with_args(args_dict)

    overall_start_time = time.time()

    try:
        generator = BlogGenerator(
            source_dir=final_settings['source'],
            templates_dir=final_settings['templates'],
            article_template=final_settings['article_template'],
            index_template=final_settings['index_template'],
            article_dir=final_settings['article_dir'],
            index_file=final_settings['index_file'],
            index_size=final_settings['index_size'],
            site_url=final_settings['site_url'],
            strict=final_settings['strict'],
            log_dir=final_settings['log_dir'],
        )
        generator.build(args.descriptors)

        total_time = time.time() - overall_start_time
        generator.logger.info(f"Site build completed in {total_time:.6f} seconds.")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def hammer_main(argv: Optional[List[str]] = None) -> None:
    """Entry point of ``hammer``: copy the current directory into the site output."""
    parser = argparse.ArgumentParser(description='SiteHammer - copy site files into the output directory')
    parser.add_argument('--output', type=str,
                        help='Output directory for the copied site')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)

    settings_loader = SiteHammerSettings()
    settings_loader.load_settings()
    final_settings = settings_loader.merge_with_args({k: v for k, v in vars(args).items() if v is not None})

    overall_start_time = time.time()

    try:
        logger = setup_logging(final_settings['log_dir'])
        SiteCopier('.', final_settings['output']).copy()
        total_time = time.time() - overall_start_time
        logger.info(f"Site build completed in {total_time:.6f} seconds.")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    blog_main()
