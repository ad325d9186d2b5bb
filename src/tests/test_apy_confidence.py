import math

from core import constants
from services.apy_confidence import assess_confidence


def test_existing_position_modest_apy_is_high():
    assessment = assess_confidence(12.5, 1.0, False, 30)
    assert assessment.confidence == constants.CONFIDENCE_HIGH
    assert assessment.warnings == []


def test_new_position_is_capped_at_medium():
    assessment = assess_confidence(4.29, 0.01, True, 1)
    assert assessment.confidence == constants.CONFIDENCE_MEDIUM
    assert len(assessment.warnings) == 1


def test_new_position_high_apy_is_low():
    assessment = assess_confidence(500, 1.4, True, 1)
    assert assessment.confidence == constants.CONFIDENCE_LOW


def test_new_position_extreme_apy_is_very_low():
    assessment = assess_confidence(5000, 14, True, 1)
    assert assessment.confidence == constants.CONFIDENCE_VERY_LOW


def test_existing_position_above_100_short_window_is_medium():
    assessment = assess_confidence(150, 2, False, 10)
    assert assessment.confidence == constants.CONFIDENCE_MEDIUM


def test_existing_position_above_100_long_window_stays_high():
    assessment = assess_confidence(150, 10, False, 30)
    assert assessment.confidence == constants.CONFIDENCE_HIGH


def test_existing_position_very_high_apy():
    assert assess_confidence(2000, 5, False, 30).confidence == constants.CONFIDENCE_LOW
    assert assess_confidence(20000, 5, False, 30).confidence == constants.CONFIDENCE_VERY_LOW


def test_short_window_high_apy_adds_warning():
    assessment = assess_confidence(2000, 1, False, 2)
    assert any("Short period" in warning for warning in assessment.warnings)


def test_large_loss_demotes_to_low():
    assessment = assess_confidence(-99, -60, False, 30)
    assert assessment.confidence == constants.CONFIDENCE_LOW
    assert any("Large period loss" in warning for warning in assessment.warnings)


def test_large_loss_never_raises_confidence():
    assessment = assess_confidence(-20000, -60, False, 30)
    assert assessment.confidence == constants.CONFIDENCE_VERY_LOW


def test_infinite_apy_is_very_low():
    assessment = assess_confidence(math.inf, 1e6, False, 0.1)
    assert assessment.confidence == constants.CONFIDENCE_VERY_LOW
    assert assessment.warnings


def test_assumed_long_window_does_not_waive_high_apy_demotion():
    assessment = assess_confidence(200, 0.6, False, 30, observed_window=False)
    assert assessment.confidence == constants.CONFIDENCE_MEDIUM
