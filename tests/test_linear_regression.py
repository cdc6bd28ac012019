import pytest

from mlplayground.algorithms.entities import Point, RegressionModel
from mlplayground.algorithms.errors import DegenerateInputError
from mlplayground.algorithms.linear_regression import (fit_linear_regression, predict, regression_line,
                                                       residuals)


def _line(xs, f):
    return [Point(x=x, y=f(x), id=i) for i, x in enumerate(xs)]


class TestFitLinearRegression:
    def test_exact_line(self):
        model = fit_linear_regression(_line(range(6), lambda x: 2 * x + 1))
        assert model.slope == pytest.approx(2.0, abs=1e-9)
        assert model.intercept == pytest.approx(1.0, abs=1e-9)
        assert model.r_squared == pytest.approx(1.0, abs=1e-9)

    def test_fewer_than_two_points(self):
        assert fit_linear_regression([]) == RegressionModel(0.0, 0.0, 0.0)
        assert fit_linear_regression([Point(x=3, y=4)]) == RegressionModel(0.0, 0.0, 0.0)

    def test_identical_x_raises(self):
        with pytest.raises(DegenerateInputError):
            fit_linear_regression([Point(x=5, y=1), Point(x=5, y=9)])

    def test_identical_fractional_x_raises(self):
        with pytest.raises(DegenerateInputError):
            fit_linear_regression([Point(x=0.1, y=1), Point(x=0.1, y=2), Point(x=0.1, y=3)])

    def test_constant_y_has_zero_r_squared(self):
        model = fit_linear_regression(_line([1, 2, 3, 4], lambda x: 7))
        assert model.slope == pytest.approx(0.0)
        assert model.intercept == pytest.approx(7.0)
        assert model.r_squared == 0.0

    def test_scattered_preset(self):
        pts = [Point(x=x, y=y) for x, y in [(2, 3), (4, 7), (6, 5), (8, 11), (10, 9)]]
        model = fit_linear_regression(pts)
        # sums: n=5, Sx=30, Sy=35, Sxy=242, Sxx=220
        assert model.slope == pytest.approx((5 * 242 - 30 * 35) / (5 * 220 - 30 ** 2))
        assert model.intercept == pytest.approx((35 - model.slope * 30) / 5)
        assert 0 < model.r_squared < 1

    def test_deterministic(self):
        pts = _line([1, 4, 9], lambda x: x * x)
        assert fit_linear_regression(pts) == fit_linear_regression(pts)


class TestDerivedOutputs:
    def test_predict_and_residuals(self):
        pts = _line(range(4), lambda x: 3 * x - 2)
        model = fit_linear_regression(pts)
        assert predict(model, 10) == pytest.approx(28.0)
        assert residuals(model, pts) == pytest.approx([0, 0, 0, 0], abs=1e-9)

    def test_regression_line_spans_one_unit_past_points(self):
        pts = _line([2, 4, 6], lambda x: x)
        line = regression_line(fit_linear_regression(pts), pts, step=0.5)
        assert line[0][0] == pytest.approx(1.0)
        assert line[-1][0] == pytest.approx(7.0)
        assert len(line) == 13
        for x, y in line:
            assert y == pytest.approx(x)

    def test_regression_line_empty_without_model(self):
        assert regression_line(RegressionModel(), [Point(x=1, y=1)]) == []


def test_round_trip():
    model = RegressionModel(slope=1.25, intercept=-0.5, r_squared=0.875)
    state = model.get_state()
    assert state == {"slope": 1.25, "intercept": -0.5, "rSquared": 0.875}
    assert RegressionModel.from_state(state) == model
