"""
Negation detection for keyword evidence.

A keyword mention reads very differently in "built with Django" and in
"migrating from Django". A mention is negated when a negation cue appears
shortly before it in the same sentence; negated mentions keep only half of
their evidence.
"""

import re
from dataclasses import dataclass

# Characters scanned before a match when looking for a negation cue
NEGATION_WINDOW = 40

# Words that end the filler run after a cue: the cue's object has ended and
# what follows ("to FastAPI", "with Django", "we use Django") is affirmed
FILLER_STOP_WORDS = (
    "to", "into", "onto", "with", "for", "by", "and", "but", "or", "now", "then",
    "we", "i", "you", "they", "our", "us", "it",
    "use", "uses", "used", "using", "adopt", "adopted", "chose", "picked",
)


@dataclass(frozen=True)
class NegationPatterns:
    """
    Regex patterns for negation cues.

    Each cue must end the scanned window, allowing up to three filler words
    between the cue and the keyword ("not using the old Django"). A stop word
    among the fillers ends the negation, so in "migrating from Django to
    FastAPI" only Django is negated.
    """

    CUE: re.Pattern = re.compile(
        r"\b(?:"
        r"not\s+(?:using|use|used|on|with|built\s+(?:with|on))"
        r"|no\s+longer(?:\s+(?:using|use|uses|used))?"
        r"|(?:don't|do\s+not|doesn't|does\s+not|didn't|did\s+not|won't|never)\s+(?:use|uses|need|needs|require|requires)"
        r"|migrat(?:e|es|ed|ing)\s+(?:away\s+)?from"
        r"|mov(?:e|es|ed|ing)\s+away\s+from"
        r"|switch(?:es|ed|ing)?\s+(?:away\s+)?from"
        r"|instead\s+of"
        r"|rather\s+than"
        r"|without"
        r"|replac(?:e|es|ed|ing)"
        r"|deprecat(?:e|es|ed|ing)"
        r"|dropp(?:ed|ing)|drop"
        r"|avoid(?:s|ed|ing)?"
        r"|unlike"
        r")"
        r"(?:\s+(?!(?:" + "|".join(FILLER_STOP_WORDS) + r")\b)[\w.+#-]+){0,3}\s*$",
        re.IGNORECASE,
    )

    # Sentence boundaries: the cue must be in the same sentence as the match
    SENTENCE_BOUNDARY: re.Pattern = re.compile(r"[.!?;:\n](?:\s|$)")


def is_negated(text: str, start: int, window: int = NEGATION_WINDOW) -> bool:
    """
    Check whether the match starting at `start` is preceded by a negation cue.

    Args:
        text: Segment text containing the match
        start: Match start offset
        window: How many characters before the match to scan

    Returns:
        True if a negation cue precedes the match in the same sentence
    """
    preceding = text[max(0, start - window) : start]

    # Cut at the last sentence boundary
    boundaries = list(NegationPatterns.SENTENCE_BOUNDARY.finditer(preceding))
    if boundaries:
        preceding = preceding[boundaries[-1].end() :]

    return bool(NegationPatterns.CUE.search(preceding))
