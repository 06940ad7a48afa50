"""Unit tests for negation detection."""

import pytest

from scout.contexts.detection.negation import is_negated


def negated_at(text: str, word: str, occurrence: int = 0) -> bool:
    """Check negation for the nth occurrence of word in text."""
    start = -1
    for _ in range(occurrence + 1):
        start = text.index(word, start + 1)
    return is_negated(text, start)


@pytest.mark.unit
@pytest.mark.parametrize(
    "text",
    [
        "We are migrating from Django to Flask",
        "The team moved away from Django last year",
        "We don't use Django here",
        "This service is not using the old Django stack",
        "Built with Flask instead of Django",
        "We no longer use Django",
        "A quick service without Django",
        "We switched from Django",
    ],
)
def test_negation_cues(text):
    assert negated_at(text, "Django")


@pytest.mark.unit
@pytest.mark.parametrize(
    "text",
    [
        "We built this with Django",
        "Django powers the admin",
        "Our Django app serves the API",
        "We are migrating from Flask to Django",
        "Instead of Flask we use Django",
        "We replaced Flask with Django",
        "We switched from Flask to Django",
    ],
)
def test_plain_mentions_are_not_negated(text):
    assert not negated_at(text, "Django")


@pytest.mark.unit
def test_negation_stops_at_sentence_boundary():
    text = "We don't use Django. Django is great elsewhere."

    assert negated_at(text, "Django", occurrence=0)
    assert not negated_at(text, "Django", occurrence=1)


@pytest.mark.unit
def test_cue_far_before_match_is_ignored():
    text = "Instead of that, we spent three long weeks tuning our Python"

    assert not negated_at(text, "Python")


@pytest.mark.unit
def test_smart_quote_cue_after_normalization():
    """Normalized text turns don’t into don't so the cue is found."""
    from scout.contexts.intake.normalizer import normalize_unicode

    text = normalize_unicode("We don’t use Django")

    assert negated_at(text, "Django")


@pytest.mark.unit
def test_migration_source_stays_negated():
    text = "We are migrating from Flask to Django"

    assert negated_at(text, "Flask")
    assert not negated_at(text, "Django")
