import pytest

from ssm.match.tiers import MatchQuality, MatchStrength, quality_for_score, strength_for_blend


@pytest.mark.parametrize("score,label", [
    (100, MatchQuality.EXCELLENT),
    (90, MatchQuality.EXCELLENT),
    (89, MatchQuality.VERY_GOOD),
    (80, MatchQuality.VERY_GOOD),
    (70, MatchQuality.GOOD),
    (60, MatchQuality.FAIR),
    (50, MatchQuality.MODERATE),
    (49, MatchQuality.LOW),
    (0, MatchQuality.LOW),
])
def test_quality_tiers(score, label):
    assert quality_for_score(score) == label


@pytest.mark.parametrize("weighted,label", [
    (1.35, MatchStrength.STRONG),
    (0.8, MatchStrength.STRONG),
    (0.79, MatchStrength.MODERATE),
    (0.6, MatchStrength.MODERATE),
    (0.4, MatchStrength.FAIR),
    (0.39, MatchStrength.WEAK),
    (0.0, MatchStrength.WEAK),
])
def test_strength_tiers(weighted, label):
    assert strength_for_blend(weighted) == label


def test_strength_nan_is_weak():
    assert strength_for_blend(float("nan")) == MatchStrength.WEAK


def test_labels_render_as_display_text():
    assert MatchQuality.VERY_GOOD.value == "Very Good"
    assert MatchStrength.STRONG.value == "Strong"
