import pytest

from pothole_survey.classifier import (
    DefectClassifier, RiskLevel, SizeCategory, classify
)

HEIGHT = 500
CENTER = HEIGHT / 2


@pytest.mark.parametrize("area, expected", [
    (1, SizeCategory.SMALL),
    (4999.99, SizeCategory.SMALL),
    (5000, SizeCategory.MEDIUM),
    (10000, SizeCategory.MEDIUM),
    (15000, SizeCategory.MEDIUM),
    (15000.01, SizeCategory.LARGE),
    (80000, SizeCategory.LARGE),
])
def test_size_thresholds(area, expected):
    size, _ = classify(area, CENTER, HEIGHT)
    assert size is expected


@pytest.mark.parametrize("area, y, expected", [
    (5000, CENTER, (SizeCategory.MEDIUM, RiskLevel.HIGH)),    # 1 + 1 = 2
    (4999, CENTER, (SizeCategory.SMALL, RiskLevel.MEDIUM)),   # 0 + 1 = 1
    (15001, 0, (SizeCategory.LARGE, RiskLevel.HIGH)),         # 2 + 0 = 2
    (15001, HEIGHT, (SizeCategory.LARGE, RiskLevel.HIGH)),
    (10000, 0, (SizeCategory.MEDIUM, RiskLevel.MEDIUM)),      # 1 + 0 = 1
    (1000, 0, (SizeCategory.SMALL, RiskLevel.LOW)),           # 0 + 0 = 0
    (1000, 100, (SizeCategory.SMALL, RiskLevel.LOW)),         # 0 + 0.4
])
def test_risk_boundaries(area, y, expected):
    assert classify(area, y, HEIGHT) == expected


def test_center_factor_range_and_monotonic():
    ys = [CENTER - d for d in range(0, int(CENTER) + 1, 25)]
    factors = [DefectClassifier.center_factor(y, HEIGHT) for y in ys]

    assert factors[0] == 1.0
    assert factors[-1] == 0.0
    assert all(0.0 <= f <= 1.0 for f in factors)
    assert all(a > b for a, b in zip(factors, factors[1:]))


def test_center_factor_symmetric():
    assert DefectClassifier.center_factor(CENTER - 80, HEIGHT) == pytest.approx(
        DefectClassifier.center_factor(CENTER + 80, HEIGHT))


@pytest.mark.parametrize("y", [-100, HEIGHT + 100, 3 * HEIGHT])
def test_center_factor_clamped_outside_frame(y):
    assert DefectClassifier.center_factor(y, HEIGHT) == 0.0


def test_outside_frame_small_pothole_is_low_risk():
    assert classify(1000, -300, HEIGHT) == (SizeCategory.SMALL, RiskLevel.LOW)


def test_classification_is_pure():
    classifier = DefectClassifier()
    first = [classifier.classify(a, y, HEIGHT) for a in (100, 7000, 20000) for y in (0, 120, 250)]
    second = [classifier.classify(a, y, HEIGHT) for a in (100, 7000, 20000) for y in (0, 120, 250)]
    assert first == second


@pytest.mark.parametrize("height", [0, -10])
def test_non_positive_frame_height_rejected(height):
    with pytest.raises(ValueError):
        classify(1000, 0, height)


def test_custom_thresholds():
    classifier = DefectClassifier({'small': 100, 'large': 200})
    assert classifier.size_category(99) is SizeCategory.SMALL
    assert classifier.size_category(150) is SizeCategory.MEDIUM
    assert classifier.size_category(201) is SizeCategory.LARGE


def test_partial_thresholds_keep_defaults():
    classifier = DefectClassifier({'large': 20000})
    assert classifier.thresholds == {'small': 5000, 'large': 20000}


def test_inverted_thresholds_rejected():
    with pytest.raises(ValueError):
        DefectClassifier({'small': 20000, 'large': 10000})


def test_risk_rank_order():
    assert RiskLevel.HIGH.rank > RiskLevel.MEDIUM.rank > RiskLevel.LOW.rank
    assert [r.rank for r in (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH)] == [0, 1, 2]


def test_enum_values_match_report_labels():
    assert [s.value for s in SizeCategory] == ["Small", "Medium", "Large"]
    assert [r.value for r in RiskLevel] == ["Low", "Medium", "High"]
