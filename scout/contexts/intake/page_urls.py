"""
Page URL derivation for the Intake context.

Maps a page's source path (relative to the site root) to the URL Jekyll
publishes it under, following the site's `permalink` setting. Frontmatter
`permalink` always wins.

Built-in styles (Jekyll's default is `date`):
    date     /:categories/:year/:month/:day/:title:output_ext
    pretty   /:categories/:year/:month/:day/:title/
    ordinal  /:categories/:year/:y_day/:title:output_ext
    none     /:categories/:title:output_ext

Any other value containing a placeholder or slash is used as a post template.
Pages follow the style's suffix: `about.md` becomes `/about.html` under
`date` and `/about/` under `pretty`. Index pages always publish as `/dir/`.

Examples:
    >>> derive_page_url("_posts/2025-01-02-hello-world.md")
    '/2025/01/02/hello-world.html'
    >>> derive_page_url("_posts/2025-01-02-hello-world.md", permalink_style="pretty")
    '/2025/01/02/hello-world/'
    >>> derive_page_url("about.md", {"permalink": "/me"})
    '/me'
"""

import re
from datetime import date
from pathlib import Path, PurePosixPath
from typing import Any, List, Optional

# Post filenames carry their date: YYYY-MM-DD-slug
POST_FILENAME = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")

# Collections whose files publish under a dated blog URL
DATED_COLLECTIONS = {"_posts", "_drafts"}

INDEX_STEMS = {"index", "readme"}

OUTPUT_EXT = ".html"

DEFAULT_PERMALINK_STYLE = "date"

PERMALINK_STYLES = {
    "date": "/:categories/:year/:month/:day/:title:output_ext",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "ordinal": "/:categories/:year/:y_day/:title:output_ext",
    "none": "/:categories/:title:output_ext",
}

PLACEHOLDER = re.compile(r":([a-z_]+)")


def normalize_url(url: str) -> str:
    """
    Normalize a URL path: leading slash, no duplicate slashes.

    Trailing slashes are preserved because Jekyll treats `/about` and
    `/about/` as different permalinks.
    """
    url = url.strip()
    if not url.startswith("/"):
        url = "/" + url
    return re.sub(r"/{2,}", "/", url)


def post_template(permalink_style: Optional[str]) -> str:
    """
    Resolve a permalink style to a post URL template.

    Raises:
        ValueError: If the style is neither a built-in name nor a template
    """
    style = (permalink_style or DEFAULT_PERMALINK_STYLE).strip()
    if style in PERMALINK_STYLES:
        return PERMALINK_STYLES[style]
    if "/" in style or ":" in style:
        return style
    raise ValueError(
        f"Unknown permalink style {style!r} (expected one of {sorted(PERMALINK_STYLES)} or a template)"
    )


def page_suffix(permalink_style: Optional[str]) -> str:
    """Suffix pages get under a style: "/" for pretty-like styles, else ".html"."""
    template = post_template(permalink_style)
    if template.endswith("/"):
        return "/"
    if template.endswith(":output_ext"):
        return OUTPUT_EXT
    return ""


def post_categories(frontmatter: dict[str, Any], directories: List[str]) -> List[str]:
    """
    Categories that prefix a post URL, lowercased and deduplicated.

    Directories above `_posts` count as categories, followed by the
    frontmatter `categories` (list or space-separated string) or `category`.
    """
    raw = frontmatter.get("categories", frontmatter.get("category"))
    if isinstance(raw, str):
        raw = raw.split()
    elif not isinstance(raw, list):
        raw = []

    categories = []
    for value in list(directories) + [str(item) for item in raw]:
        slug = re.sub(r"\s+", "-", value.strip().lower())
        if slug and slug not in categories:
            categories.append(slug)
    return categories


def _post_date(frontmatter: dict[str, Any], filename_date: Optional[date]) -> Optional[date]:
    # Frontmatter date overrides the filename date
    value = frontmatter.get("date")
    if isinstance(value, date):
        return value
    return filename_date


def fill_template(template: str, placeholders: dict[str, str]) -> str:
    """Substitute `:name` placeholders; unknown names are left as written."""
    return PLACEHOLDER.sub(lambda m: placeholders.get(m.group(1), m.group(0)), template)


def _post_url(
    stem: str,
    directories: List[str],
    frontmatter: dict[str, Any],
    permalink_style: Optional[str],
) -> str:
    match = POST_FILENAME.match(stem)
    if match:
        year, month, day, slug = match.groups()
        filename_date = date(int(year), int(month), int(day))
    else:
        slug, filename_date = stem, None

    if frontmatter.get("slug"):
        slug = str(frontmatter["slug"]).strip()

    published = _post_date(frontmatter, filename_date)
    if published is None:
        # Undated drafts have no date parts to fill
        return normalize_url(f"/{slug}{page_suffix(permalink_style)}")

    placeholders = {
        "categories": "/".join(post_categories(frontmatter, directories)),
        "year": f"{published.year:04d}",
        "month": f"{published.month:02d}",
        "day": f"{published.day:02d}",
        "i_month": str(published.month),
        "i_day": str(published.day),
        "short_year": f"{published.year % 100:02d}",
        "y_day": f"{published.timetuple().tm_yday:03d}",
        "title": slug,
        "slug": slug,
        "output_ext": OUTPUT_EXT,
    }
    return normalize_url(fill_template(post_template(permalink_style), placeholders))


def derive_page_url(
    relative_path,
    frontmatter: Optional[dict[str, Any]] = None,
    permalink_style: Optional[str] = DEFAULT_PERMALINK_STYLE,
) -> str:
    """
    Derive the published URL of a page.

    Args:
        relative_path: Source path relative to the site root (str or Path)
        frontmatter: Parsed frontmatter (permalink is honored if present)
        permalink_style: Site `permalink` setting (built-in name or template)

    Returns:
        URL path string starting with "/"

    Raises:
        ValueError: If permalink_style is not a known style or template
    """
    frontmatter = frontmatter or {}
    permalink = frontmatter.get("permalink")
    if isinstance(permalink, str) and permalink.strip():
        return normalize_url(permalink)

    path = PurePosixPath(Path(relative_path).as_posix())
    parts = list(path.parts[:-1])
    stem = path.stem

    for position, part in enumerate(parts):
        if part in DATED_COLLECTIONS:
            return _post_url(stem, parts[:position], frontmatter, permalink_style)

    # Other collections publish without their leading underscore
    if parts and parts[0].startswith("_"):
        parts[0] = parts[0][1:]

    if stem.lower() in INDEX_STEMS:
        return normalize_url("/" + "/".join(parts) + "/") if parts else "/"

    return normalize_url("/" + "/".join(parts + [stem]) + page_suffix(permalink_style))


def relative_to_site(file_path, site_root) -> PurePosixPath:
    """
    Path of a page relative to the site root.

    Raises:
        ValueError: If the page lies outside the site root
    """
    resolved = Path(file_path).resolve()
    try:
        relative = resolved.relative_to(Path(site_root).resolve())
    except ValueError:
        raise ValueError(f"{file_path} is not inside site root {site_root}") from None
    return PurePosixPath(relative.as_posix())
