"""
Page text normalizer for the Intake context.

Normalizes markdown bodies before structural extraction so that keyword
matching sees plain ASCII punctuation (smart quotes in "don't use" would
otherwise hide negation cues) and no template markup.

Design principle: Normalize BEFORE parsing.
"""

import re
import unicodedata

from scout.contexts.intake.page_patterns import LiquidComponentPatterns

# Unicode replacements: problematic char -> ASCII equivalent
UNICODE_REPLACEMENTS = {
    # Spaces
    "\u00a0": " ",  # non-breaking space
    "\u202f": " ",  # narrow no-break space
    # Zero-width characters -> remove
    "\u200b": "",  # zero-width space
    "\u200c": "",  # zero-width non-joiner
    "\u200d": "",  # zero-width joiner
    "\u2060": "",  # word joiner
    "\ufeff": "",  # BOM
    # Quotes
    "\u2018": "'",  # left single quote
    "\u2019": "'",  # right single quote
    "\u201c": '"',  # left double quote
    "\u201d": '"',  # right double quote
    # Dashes
    "\u2013": "-",  # en dash
    "\u2014": "--",  # em dash
    # Bullets and misc
    "\u2022": "*",  # bullet
    "\u2026": "...",  # ellipsis
    "\u00b7": "*",  # middle dot
}


_REPLACEMENT_TABLE = str.maketrans(UNICODE_REPLACEMENTS)


def normalize_unicode(text: str) -> str:
    """NFKC-normalize, then map the characters in UNICODE_REPLACEMENTS to ASCII."""
    return unicodedata.normalize("NFKC", text).translate(_REPLACEMENT_TABLE)


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_liquid_markup(text: str) -> str:
    """
    Remove Liquid tags and output expressions from prose.

    Includes are extracted as components before this runs, so dropping
    them here only removes noise from keyword matching.
    """
    return LiquidComponentPatterns.LIQUID_MARKUP.sub(" ", text)


def strip_inline_markdown(text: str) -> str:
    """
    Reduce inline markdown to plain words.

    Keeps link text, drops link targets, images, emphasis markers and
    inline code backticks.
    """
    text = re.sub(r"!\[([^\]]*)\]\([^)]*\)", r"\1", text)
    text = re.sub(r"\[([^\]]+)\]\([^)]*\)", r"\1", text)
    text = re.sub(r"`([^`]*)`", r"\1", text)
    text = re.sub(r"(?<!\w)(\*\*|__|\*|_)(\S(?:.*?\S)?)\1(?!\w)", r"\2", text)
    return text


def preprocess_page_text(text: str) -> str:
    """
    Preprocess a raw page file before frontmatter splitting.

    This is the main entry point for page normalization.
    Handles:
    - Line ending normalization
    - Unicode normalization (non-breaking spaces, smart quotes, etc.)

    Args:
        text: Raw page file content

    Returns:
        Normalized text ready for parsing
    """
    text = normalize_line_endings(text)
    text = normalize_unicode(text)
    return text
