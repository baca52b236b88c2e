
import pytest
import notegrid.easing


# ─── Core properties of all easing functions ─────────────────────────────────


def test_all_easings_zero_at_zero ():

	"""Every easing function returns 0.0 at t=0."""

	for name, fn in notegrid.easing.EASING_FUNCTIONS.items():
		assert fn(0.0) == pytest.approx(0.0), f"{name}(0) should be 0.0"


def test_all_easings_one_at_one ():

	"""Every easing function returns 1.0 at t=1."""

	for name, fn in notegrid.easing.EASING_FUNCTIONS.items():
		assert fn(1.0) == pytest.approx(1.0), f"{name}(1) should be 1.0"


def test_all_easings_monotonic ():

	"""Every easing function is non-decreasing over [0, 1]."""

	steps = 100
	for name, fn in notegrid.easing.EASING_FUNCTIONS.items():
		values = [fn(i / steps) for i in range(steps + 1)]
		for i in range(len(values) - 1):
			assert values[i] <= values[i + 1] + 1e-9, (
				f"{name} is not monotonic at t={i/steps:.2f}"
			)


# ─── Shape-specific characteristics ──────────────────────────────────────────


def test_linear_is_identity ():

	"""linear(t) == t for a range of values."""

	for t in [0.0, 0.25, 0.5, 0.75, 1.0]:
		assert notegrid.easing.linear(t) == pytest.approx(t)


def test_exponential_fast_start ():

	"""exponential is a cubic ease-out: 0.875 at the midpoint."""

	assert notegrid.easing.exponential(0.5) == pytest.approx(0.875)


def test_smooth_symmetric ():

	"""smooth midpoint equals 0.5 and it starts slower than linear."""

	assert notegrid.easing.smooth(0.5) == pytest.approx(0.5)
	assert notegrid.easing.smooth(0.1) < 0.1


def test_step_holds_until_the_end ():

	"""step stays at 0 for the whole segment."""

	assert notegrid.easing.step(0.0) == 0.0
	assert notegrid.easing.step(0.999) == 0.0
	assert notegrid.easing.step(1.0) == 1.0


def test_cubic_bezier_endpoints_and_straight_line ():

	"""A Bezier passes through its endpoints; evenly spaced controls give a straight line."""

	assert notegrid.easing.cubic_bezier(0.2, 0.9, 0.1, 0.7, 0.0) == pytest.approx(0.2)
	assert notegrid.easing.cubic_bezier(0.2, 0.9, 0.1, 0.7, 1.0) == pytest.approx(0.7)
	assert notegrid.easing.cubic_bezier(0.0, 1 / 3, 2 / 3, 1.0, 0.4) == pytest.approx(0.4)


# ─── get_easing ───────────────────────────────────────────────────────────────


def test_get_easing_by_string ():

	"""get_easing returns the correct function for a valid name."""

	fn = notegrid.easing.get_easing("linear")
	assert fn is notegrid.easing.linear


def test_get_easing_all_names ():

	"""get_easing works for every registered name."""

	for name, expected in notegrid.easing.EASING_FUNCTIONS.items():
		assert notegrid.easing.get_easing(name) is expected


def test_get_easing_callable_passthrough ():

	"""get_easing returns the callable unchanged when passed a function."""

	custom = lambda t: t ** 0.5
	assert notegrid.easing.get_easing(custom) is custom


def test_get_easing_unknown_raises ():

	"""get_easing raises ValueError for an unknown string name."""

	with pytest.raises(ValueError, match="Unknown easing shape"):
		notegrid.easing.get_easing("bogus_shape")


# ─── interpolate ──────────────────────────────────────────────────────────────


def test_interpolate_linear_midpoint ():

	"""Linear interpolation at t=0.5 is the arithmetic midpoint."""

	assert notegrid.easing.interpolate(100.0, 140.0, 0.5) == pytest.approx(120.0)


def test_interpolate_descending ():

	"""Interpolation works from a higher to a lower value."""

	assert notegrid.easing.interpolate(1.0, 0.0, 0.5, "exponential") == pytest.approx(0.125)


def test_interpolate_step_holds_start ():

	"""Step interpolation keeps the start value until t reaches 1."""

	assert notegrid.easing.interpolate(0.2, 0.8, 0.75, "step") == pytest.approx(0.2)
	assert notegrid.easing.interpolate(0.2, 0.8, 1.0, "step") == pytest.approx(0.8)
