"""Unit tests for hot-score formulas."""

import math
from datetime import UTC, datetime, timedelta

import pytest

from core.ranking import article_hot_score, comment_hot_score, hours_since, read_time_minutes

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


def test_hours_since_treats_naive_as_utc():
    moment = (NOW - timedelta(hours=6)).replace(tzinfo=None)
    assert hours_since(moment, NOW) == pytest.approx(6.0)


def test_hours_since_never_negative():
    assert hours_since(NOW + timedelta(hours=1), NOW) == 0.0
    assert hours_since(None, NOW) == 0.0


def test_comment_score_fresh():
    # (10*0.6 - 2*0.1 + 4*0.3) * 10
    assert comment_hot_score(10, 2, 4, NOW, now=NOW) == pytest.approx(70.0)


def test_comment_score_decays_over_a_day():
    score = comment_hot_score(10, 0, 0, NOW - timedelta(hours=24), now=NOW)
    assert score == pytest.approx(60.0 * math.exp(-1))


def test_comment_score_bonuses():
    base = comment_hot_score(101, 0, 0, NOW, now=NOW)
    assert base == pytest.approx(101 * 0.6 * 10 * 1.2)
    by_author = comment_hot_score(101, 0, 0, NOW, is_author=True, now=NOW)
    assert by_author == pytest.approx(base * 1.3)


def test_comment_with_no_activity_scores_zero():
    assert comment_hot_score(0, 0, 0, NOW, now=NOW) == 0.0


def test_article_score():
    # 100*0.1 + 10*0.5 + 10*0.3 + 20*0.1 = 20, decayed by one time constant
    score = article_hot_score(100, 10, 10, 20, NOW - timedelta(hours=48), now=NOW)
    assert score == pytest.approx(20 * math.exp(-1))


@pytest.mark.parametrize("words, minutes", [(0, 1), (299, 1), (300, 1), (301, 2), (1500, 5)])
def test_read_time(words, minutes):
    assert read_time_minutes(words) == minutes
