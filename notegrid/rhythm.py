"""Rhythm grid codec.

Parses step-sequencer pattern strings such as ``"x..x..x.|x.x.x.x."`` into a
:class:`PatternGrid` and generates pattern strings back from a grid.

**Pattern characters:**

- ``x``: hit (velocity 1.0)
- ``X``, ``o``, ``O``: accented hit (velocity 1.0, accent flag set)
- ``1``-``9``: velocity levels from 0.2 up to 1.0
- ``.``, ``_``, ``0``, ``-``: rest (any other character is a rest as well)
- ``|``: bar separator

Every transform in this module is pure and returns a new grid with
``total_steps == steps_per_bar * num_bars``.
"""

import dataclasses
import logging
import math
import typing

import notegrid.bars
import notegrid.constants
import notegrid.constants.velocity
import notegrid.sequence_utils


logger = logging.getLogger(__name__)


ACCENT_CHARS = frozenset("XoO")
REST_CHAR = "."
HIT_CHAR = "x"
ACCENT_CHAR = "X"


@dataclasses.dataclass(frozen=True)
class PatternStep:

	"""
	A single step: velocity 0 is a rest, anything above is a hit.
	"""

	velocity: float = notegrid.constants.velocity.REST
	accent: bool = False

	@property
	def is_hit (self) -> bool:

		"""True when the step sounds."""

		return self.velocity > 0


REST = PatternStep()


@dataclasses.dataclass
class PatternConfig:

	"""
	Grid dimensions. ``steps_per_bar=None`` lets :func:`parse` infer it from the text.
	"""

	steps_per_bar: typing.Optional[int] = None
	num_bars: int = notegrid.constants.DEFAULT_NUM_BARS
	beats_per_bar: float = notegrid.constants.DEFAULT_BEATS_PER_BAR


@dataclasses.dataclass
class PatternGrid:

	"""
	A flat list of steps laid out bar after bar.
	"""

	steps: typing.List[PatternStep]
	steps_per_bar: int
	num_bars: int
	beats_per_bar: float = notegrid.constants.DEFAULT_BEATS_PER_BAR

	@property
	def total_steps (self) -> int:

		"""Number of steps across all bars."""

		return self.steps_per_bar * self.num_bars

	def bar (self, bar_index: int) -> typing.List[PatternStep]:

		"""Return the steps belonging to one bar."""

		start = bar_index * self.steps_per_bar
		return self.steps[start:start + self.steps_per_bar]

	def hit_indices (self) -> typing.List[int]:

		"""Indices of all sounding steps."""

		return notegrid.sequence_utils.sequence_to_indices([step.velocity for step in self.steps])


def _check_dimensions (steps_per_bar: int, beats_per_bar: float) -> None:

	if steps_per_bar <= 0:
		raise ValueError(f"steps_per_bar must be positive, got {steps_per_bar}")

	if beats_per_bar <= 0:
		raise ValueError(f"beats_per_bar must be positive, got {beats_per_bar}")


def _check_index (grid: PatternGrid, step_index: int) -> None:

	if not 0 <= step_index < len(grid.steps):
		raise IndexError(f"Step index {step_index} out of range for {len(grid.steps)} steps")


def parse_step_char (ch: str) -> PatternStep:

	"""Map one pattern character onto a step. Unknown characters are rests."""

	if ch == HIT_CHAR:
		return PatternStep(notegrid.constants.velocity.HIT, False)

	if ch in ACCENT_CHARS:
		return PatternStep(notegrid.constants.velocity.HIT, True)

	if ch in "123456789":
		digit = int(ch)
		return PatternStep(digit_to_velocity(digit), False)

	return REST


def digit_to_velocity (digit: int) -> float:

	"""Velocity for a ``1``-``9`` pattern digit."""

	floor = notegrid.constants.velocity.DIGIT_FLOOR
	return floor + (digit / 9) * (1.0 - floor)


def velocity_to_digit (velocity: float) -> int:

	"""Nearest pattern digit for a velocity, clamped to 1-9."""

	floor = notegrid.constants.velocity.DIGIT_FLOOR
	digit = math.floor((velocity - floor) / (1.0 - floor) * 9 + 0.5)
	return int(notegrid.sequence_utils.clamp(digit, 1, 9))


def step_to_char (step: PatternStep) -> str:

	"""Inverse of :func:`parse_step_char`."""

	if step.velocity <= 0:
		return REST_CHAR

	if step.accent:
		return ACCENT_CHAR

	if step.velocity >= notegrid.constants.velocity.FULL_HIT_THRESHOLD:
		return HIT_CHAR

	return str(velocity_to_digit(step.velocity))


def parse (text: str, config: typing.Optional[PatternConfig] = None) -> PatternGrid:

	"""
	Parse a pattern string into a :class:`PatternGrid`.

	Parameters:
		text: Pattern notation, bars separated by ``|``.
		config: Optional dimensions. When ``config.steps_per_bar`` is set every
			bar is resampled to that width; otherwise the width of the first
			non-empty bar is used (16 when there is none).

	Bars whose length differs from ``steps_per_bar`` are resampled by
	nearest-lower proportional mapping rather than rejected. Parsing never
	fails on malformed characters.

	Example:
		```python
		grid = parse("x..x..x.|x.x.x.x.")
		grid.steps_per_bar  # 8
		grid.num_bars       # 2
		```
	"""

	config = config or PatternConfig()

	bars = [
		[ch for ch in bar if not ch.isspace()]
		for bar in notegrid.bars.split_into_bars(text)
	]

	if not bars:
		bars = [[]]

	steps_per_bar = config.steps_per_bar or 0

	if steps_per_bar == 0:
		steps_per_bar = next((len(bar) for bar in bars if bar), notegrid.constants.DEFAULT_STEPS_PER_BAR)

	_check_dimensions(steps_per_bar, config.beats_per_bar)

	steps: typing.List[PatternStep] = []

	for bar in bars:

		if not bar:
			steps.extend([REST] * steps_per_bar)
			continue

		if len(bar) != steps_per_bar:
			logger.debug(f"Resampling bar of {len(bar)} steps onto {steps_per_bar}")

		steps.extend(parse_step_char(ch) for ch in notegrid.sequence_utils.resample(bar, steps_per_bar))

	return PatternGrid(
		steps = steps,
		steps_per_bar = steps_per_bar,
		num_bars = len(bars),
		beats_per_bar = config.beats_per_bar,
	)


def generate (grid: PatternGrid) -> str:

	"""
	Generate a pattern string from a grid.

	Missing steps (a grid shorter than ``total_steps``) are written as rests.
	"""

	bars: typing.List[str] = []

	for bar_index in range(grid.num_bars):

		start = bar_index * grid.steps_per_bar
		chars = []

		for step_index in range(start, start + grid.steps_per_bar):
			step = grid.steps[step_index] if step_index < len(grid.steps) else REST
			chars.append(step_to_char(step))

		bars.append("".join(chars))

	return notegrid.bars.BAR_SEPARATOR.join(bars)


def create_empty_grid (config: PatternConfig) -> PatternGrid:

	"""Create a grid of rests with the given dimensions."""

	steps_per_bar = config.steps_per_bar or notegrid.constants.DEFAULT_STEPS_PER_BAR
	_check_dimensions(steps_per_bar, config.beats_per_bar)

	return PatternGrid(
		steps = [REST] * (steps_per_bar * config.num_bars),
		steps_per_bar = steps_per_bar,
		num_bars = config.num_bars,
		beats_per_bar = config.beats_per_bar,
	)


def _with_step (grid: PatternGrid, step_index: int, step: PatternStep) -> PatternGrid:

	steps = list(grid.steps)
	steps[step_index] = step
	return dataclasses.replace(grid, steps=steps)


def toggle_step (grid: PatternGrid, step_index: int, velocity: typing.Optional[float] = None) -> PatternGrid:

	"""
	Toggle a step on or off.

	With an explicit ``velocity`` the step is set to that velocity (no accent)
	instead of being toggled.
	"""

	_check_index(grid, step_index)

	if velocity is not None:
		return _with_step(grid, step_index, PatternStep(velocity, False))

	if grid.steps[step_index].is_hit:
		return _with_step(grid, step_index, REST)

	return _with_step(grid, step_index, PatternStep(notegrid.constants.velocity.HIT, False))


def toggle_accent (grid: PatternGrid, step_index: int) -> PatternGrid:

	"""Flip the accent of a sounding step. Rests are left unchanged."""

	_check_index(grid, step_index)

	step = grid.steps[step_index]

	if not step.is_hit:
		return dataclasses.replace(grid, steps=list(grid.steps))

	return _with_step(grid, step_index, PatternStep(step.velocity, not step.accent))


def set_step_velocity (grid: PatternGrid, step_index: int, velocity: float) -> PatternGrid:

	"""Set a step's velocity, clamped to ``[0, 1.2]``, keeping its accent."""

	_check_index(grid, step_index)

	clamped = notegrid.sequence_utils.clamp(velocity, notegrid.constants.velocity.REST, notegrid.constants.velocity.MAX_STEP_VELOCITY)

	return _with_step(grid, step_index, PatternStep(clamped, grid.steps[step_index].accent))


def resize_grid (grid: PatternGrid, config: PatternConfig) -> PatternGrid:

	"""
	Remap a grid onto new dimensions, keeping as much content as fits.

	Each new step reads from the old bar ``(bar % old_num_bars)`` at the
	proportionally mapped step, so extra bars repeat the existing ones.
	"""

	steps_per_bar = config.steps_per_bar or grid.steps_per_bar
	_check_dimensions(steps_per_bar, config.beats_per_bar)

	steps: typing.List[PatternStep] = []

	for i in range(steps_per_bar * config.num_bars):

		if grid.num_bars <= 0:
			steps.append(REST)
			continue

		old_bar = (i // steps_per_bar) % grid.num_bars
		old_step = notegrid.sequence_utils.proportional_index(i % steps_per_bar, grid.steps_per_bar, steps_per_bar)
		old_index = old_bar * grid.steps_per_bar + old_step

		steps.append(grid.steps[old_index] if old_index < len(grid.steps) else REST)

	return PatternGrid(
		steps = steps,
		steps_per_bar = steps_per_bar,
		num_bars = config.num_bars,
		beats_per_bar = config.beats_per_bar,
	)


def generate_euclidean (hits: int, steps: int) -> typing.List[PatternStep]:

	"""
	Evenly distribute ``hits`` across ``steps``.

	Uses the running-bucket distribution, so ``generate_euclidean(3, 8)``
	sounds on steps 0, 3 and 6.
	"""

	sequence = notegrid.sequence_utils.generate_bresenham_sequence(steps, hits)

	return [PatternStep(notegrid.constants.velocity.HIT, False) if hit else REST for hit in sequence]


def apply_euclidean (grid: PatternGrid, hits: int) -> PatternGrid:

	"""Replace every bar of the grid with the same Euclidean bar."""

	bar = generate_euclidean(hits, grid.steps_per_bar)

	return dataclasses.replace(grid, steps=bar * grid.num_bars)


def shift_pattern (grid: PatternGrid, amount: int) -> PatternGrid:

	"""
	Rotate each bar independently by ``amount`` steps.

	Positive amounts move hits later, negative amounts earlier; the amount is
	taken modulo ``steps_per_bar``.
	"""

	steps: typing.List[PatternStep] = []

	for bar_index in range(grid.num_bars):
		steps.extend(notegrid.sequence_utils.roll(grid.bar(bar_index), amount))

	return dataclasses.replace(grid, steps=steps)


def invert_pattern (grid: PatternGrid) -> PatternGrid:

	"""
	Swap hits and rests.

	Lossy: accents are dropped and every new hit has velocity 1.0.
	"""

	steps = [
		REST if step.is_hit else PatternStep(notegrid.constants.velocity.HIT, False)
		for step in grid.steps
	]

	return dataclasses.replace(grid, steps=steps)


def clear_pattern (grid: PatternGrid) -> PatternGrid:

	"""Return a grid of the same shape with every step silenced."""

	return dataclasses.replace(grid, steps=[REST] * len(grid.steps))


def step_to_beat (grid: PatternGrid, step_index: int) -> float:

	"""Beat position at which a step starts."""

	bar_index, step_in_bar = divmod(step_index, grid.steps_per_bar)

	return bar_index * grid.beats_per_bar + (step_in_bar / grid.steps_per_bar) * grid.beats_per_bar


def beat_to_step (grid: PatternGrid, beat: float) -> int:

	"""Index of the step containing ``beat``."""

	bar_index = math.floor(beat / grid.beats_per_bar)
	beat_in_bar = beat - bar_index * grid.beats_per_bar
	step_in_bar = math.floor((beat_in_bar / grid.beats_per_bar) * grid.steps_per_bar)

	return bar_index * grid.steps_per_bar + step_in_bar


def grid_duration_beats (grid: PatternGrid) -> float:

	"""Total length of the grid in beats."""

	return grid.num_bars * grid.beats_per_bar
