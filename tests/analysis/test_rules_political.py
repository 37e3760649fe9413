import pytest

from signal_detect.rules_political import UNMATCHED, classify_political_context, context_score


@pytest.mark.parametrize("text,expected", [
    ("Joint Sword-2024A drills around Taiwan", "exercise"),
    ("Strait Thunder live-fire exercise", "exercise"),
    ("Taiwan presidential election", "election"),
    ("KMT recall vote", "election"),
    ("20th Party Congress opens", "congress"),
    ("NPC annual session", "congress"),
    ("Lai inauguration", "inauguration"),
    ("Double Ten Day (ROC National Day)", "inauguration"),
    ("Lunar New Year", "holiday"),
    ("New Year's Day", "holiday"),
    ("Human Rights Day", UNMATCHED),
    ("", UNMATCHED),
])
def test_classify_political_context(text, expected):
    assert classify_political_context(text) == expected


def test_whole_word_matching():
    # "drills" inside another word must not count
    assert classify_political_context("overdrillsome statement") == UNMATCHED
    assert classify_political_context("ELECTION night") == "election"


def test_first_context_wins():
    # exercise is checked before election
    assert classify_political_context("Drills after the election") == "exercise"


def test_context_scores():
    assert context_score("exercise") == 0.7
    assert context_score("election") == 0.2
    assert context_score("congress") == 0.25
    assert context_score("inauguration") == 0.2
    assert context_score("holiday") == 0.3
    assert context_score(UNMATCHED) == 0.4
    assert context_score("something new") == 0.4
