import pytest

from interview_coach.core.aggregator import READINESS_THRESHOLDS, average_score, readiness_for
from interview_coach.models.feedback import ReadinessTier


def test_average_of_6_8_10_is_ready():
    average = average_score([6, 8, 10])
    assert average == 8.0
    assert readiness_for(average) == ReadinessTier.READY


def test_average_of_9_9_8_is_highly_ready():
    average = average_score([9, 9, 8])
    assert average == 8.7
    assert readiness_for(average) == ReadinessTier.HIGHLY_READY


@pytest.mark.parametrize("scores, expected", [
    ([8.25], 8.3),
    ([7.05], 7.1),
    ([0, 0, 1], 0.3),
    ([10, 10], 10.0),
])
def test_average_rounds_half_up_to_one_decimal(scores, expected):
    assert average_score(scores) == expected


def test_average_of_nothing_is_an_error():
    with pytest.raises(ValueError):
        average_score([])


@pytest.mark.parametrize("score, tier", [
    (10.0, ReadinessTier.HIGHLY_READY),
    (8.5, ReadinessTier.HIGHLY_READY),
    (8.4, ReadinessTier.READY),
    (7.0, ReadinessTier.READY),
    (6.9, ReadinessTier.NEEDS_WORK),
    (5.0, ReadinessTier.NEEDS_WORK),
    (4.9, ReadinessTier.NOT_READY),
    (0.0, ReadinessTier.NOT_READY),
])
def test_readiness_thresholds(score, tier):
    assert readiness_for(score) == tier


def test_thresholds_are_ordered_highest_first():
    values = [threshold for threshold, _ in READINESS_THRESHOLDS]
    assert values == sorted(values, reverse=True)
    ranks = [tier.rank for _, tier in READINESS_THRESHOLDS]
    assert ranks == sorted(ranks, reverse=True)
