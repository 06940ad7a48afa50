"""
Site archive loader for the Intake context.

Walks a Jekyll source tree and loads every markdown page as a PageDocument.
Directories Jekyll never publishes (build output, vendored gems, underscore
directories other than content collections) are skipped.
"""

import warnings
from pathlib import Path
from typing import Iterator, List

from scout.contexts.intake.page_data_structure import PageDocument
from scout.contexts.intake.page_urls import DEFAULT_PERMALINK_STYLE

MARKDOWN_SUFFIXES = {".md", ".markdown"}

# Underscore directories that hold publishable content
CONTENT_COLLECTIONS = {"_posts", "_drafts", "_docs", "_projects"}

# Directories never scanned
EXCLUDED_DIRECTORIES = {"_site", "vendor", "node_modules", ".git", ".jekyll-cache", ".sass-cache"}

# Top-level files that are repository docs, not site pages
EXCLUDED_FILENAMES = {"README.md", "CHANGELOG.md", "LICENSE.md", "CONTRIBUTING.md"}


class SiteArchive:
    """
    Loads the markdown pages of a Jekyll site.

    Attributes:
        site_root: Jekyll source directory
        include_drafts: Whether _drafts pages are loaded
        permalink_style: Site `permalink` setting used to derive page URLs
    """

    def __init__(
        self,
        site_root: Path,
        include_drafts: bool = False,
        permalink_style: str = DEFAULT_PERMALINK_STYLE,
    ):
        self.site_root = Path(site_root)
        self.include_drafts = include_drafts
        self.permalink_style = permalink_style

    def _is_excluded(self, relative: Path) -> bool:
        """Check whether a path (relative to the site root) should be skipped."""
        directories = relative.parts[:-1]
        for directory in directories:
            if directory in EXCLUDED_DIRECTORIES or directory.startswith("."):
                return True
        if directories and directories[0].startswith("_"):
            if directories[0] not in CONTENT_COLLECTIONS:
                return True
            if directories[0] == "_drafts" and not self.include_drafts:
                return True
        if len(relative.parts) == 1 and relative.name in EXCLUDED_FILENAMES:
            return True
        return False

    def iter_page_paths(self) -> Iterator[Path]:
        """
        Yield markdown page paths in sorted order.

        Raises:
            FileNotFoundError: If the site root does not exist
        """
        if not self.site_root.is_dir():
            raise FileNotFoundError(f"Site root not found: {self.site_root}")

        for path in sorted(self.site_root.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in MARKDOWN_SUFFIXES:
                continue
            if self._is_excluded(path.relative_to(self.site_root)):
                continue
            yield path

    def load(self) -> List[PageDocument]:
        """
        Load every page in the site.

        Pages that cannot be read are skipped with a warning so one broken
        file does not stop a site build.

        Returns:
            Loaded PageDocument instances, in path order
        """
        pages = []
        for path in self.iter_page_paths():
            try:
                page = PageDocument.from_file(
                    path, site_root=self.site_root, permalink_style=self.permalink_style
                )
            except (OSError, UnicodeDecodeError) as e:
                warnings.warn(f"Skipping {path}: {e}", stacklevel=2)
                continue
            pages.append(page)
        return pages
