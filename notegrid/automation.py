"""Automation curves.

An :class:`AutomationLane` holds control points for one parameter of one
entity (a group, voice or effect). Values are stored normalised to [0, 1]
and converted to parameter units with the lane's ``min_value`` and
``max_value``. Each point's curve type shapes the segment that leads to the
next point.

Lanes convert to and from ``fade()`` calls in source code::

	group("drums").fade("amp", 0.000, 0.800, 4.00);

:func:`parse_fade_code` is a best-effort textual match for that exact call
shape, not a parser for the host language: reordered arguments, renamed
calls or expressions in place of numbers are not recognised.
"""

import dataclasses
import decimal
import enum
import logging
import re
import typing
import uuid

import notegrid.constants
import notegrid.easing


logger = logging.getLogger(__name__)


class CurveType (str, enum.Enum):

	"""How a segment interpolates towards the next point."""

	LINEAR = "linear"
	EXPONENTIAL = "exponential"
	SMOOTH = "smooth"
	STEP = "step"
	BEZIER = "bezier"


_NUMBER = r"(-?(?:\d+(?:\.\d*)?|\.\d+))"


class EntityType (str, enum.Enum):

	"""The kind of entity an automation lane targets.

	Each member knows how its call is written in source code and how to
	recognise that call again, so the choice is made once per lane.
	"""

	GROUP = "group"
	VOICE = "voice"
	EFFECT = "effect"

	@property
	def color (self) -> str:

		"""Display colour for lanes of this entity type."""

		return _ENTITY_COLORS[self]

	def call (self, name: str) -> str:

		"""Source expression selecting the entity, e.g. ``group("drums")``."""

		return f'{self.value}("{name}")'

	def fade_pattern (self, name: str, param: str) -> typing.Pattern[str]:

		"""Compiled pattern matching ``<entity>("name").fade("param", start, end, duration)``."""

		return re.compile(
			rf"{self.value}\s*\(\s*[\"']{re.escape(name)}[\"']\s*\)"
			rf"\s*\.\s*fade\s*\(\s*[\"']{re.escape(param)}[\"']\s*,"
			rf"\s*{_NUMBER}\s*,\s*{_NUMBER}\s*,\s*{_NUMBER}\s*\)"
		)


_ENTITY_COLORS: typing.Dict[EntityType, str] = {
	EntityType.GROUP: "#569cd6",
	EntityType.VOICE: "#9bbb59",
	EntityType.EFFECT: "#c586c0",
}


def generate_automation_id () -> str:

	"""Unique identifier for a point or lane."""

	return f"auto_{uuid.uuid4().hex[:12]}"


@dataclasses.dataclass
class BezierHandle:

	"""Offset of a Bezier control point from its anchor, in beats and normalised value."""

	beat: float = 0.0
	value: float = 0.0


@dataclasses.dataclass
class AutomationTarget:

	"""
	The parameter being automated.
	"""

	entity_type: EntityType
	name: str
	param: str

	def __post_init__ (self) -> None:

		self.entity_type = EntityType(self.entity_type)

	@property
	def label (self) -> str:

		"""Readable label such as ``"drums.amp"``."""

		return f"{self.name}.{self.param}"


@dataclasses.dataclass
class AutomationPoint:

	"""
	A control point. ``curve_type`` shapes the segment towards the next point.
	"""

	beat: float
	value: float
	curve_type: CurveType = CurveType.SMOOTH
	id: str = dataclasses.field(default_factory=generate_automation_id)
	bezier_out: typing.Optional[BezierHandle] = None
	bezier_in: typing.Optional[BezierHandle] = None
	selected: bool = False

	def __post_init__ (self) -> None:

		self.curve_type = CurveType(self.curve_type)


@dataclasses.dataclass
class AutomationConfig:

	"""
	Editing defaults for automation lanes.
	"""

	grid_snap: float = notegrid.constants.DEFAULT_GRID_SNAP
	value_snap: float = 0.0
	default_curve_type: CurveType = CurveType.SMOOTH


@dataclasses.dataclass
class AutomationLane:

	"""
	Control points for one target, with the parameter range used to denormalise them.

	Points are kept in insertion order; evaluation sorts them by beat with a
	stable sort, so points sharing a beat are ordered by insertion.
	"""

	target: AutomationTarget
	points: typing.List[AutomationPoint] = dataclasses.field(default_factory=list)
	min_value: float = 0.0
	max_value: float = 1.0
	id: str = dataclasses.field(default_factory=generate_automation_id)
	visible: bool = True
	color: typing.Optional[str] = None
	label: typing.Optional[str] = None
	armed: bool = False

	def __post_init__ (self) -> None:

		if self.color is None:
			self.color = self.target.entity_type.color

		if self.label is None:
			self.label = self.target.label

	def sorted_points (self) -> typing.List[AutomationPoint]:

		"""Points ordered by beat, ties kept in insertion order."""

		return sorted(self.points, key=lambda point: point.beat)

	def add_point (self, beat: float, value: float, curve_type: CurveType = CurveType.SMOOTH) -> AutomationPoint:

		"""Create a point, append it to the lane and return it."""

		point = create_point(beat, value, curve_type)
		self.points.append(point)

		return point

	def find_point (self, point_id: str) -> typing.Optional[AutomationPoint]:

		"""Return the point with ``point_id``, or ``None``."""

		return next((point for point in self.points if point.id == point_id), None)

	def remove_point (self, point_id: str) -> bool:

		"""Remove a point by id. Returns whether a point was removed."""

		point = self.find_point(point_id)

		if point is None:
			return False

		self.points.remove(point)

		return True

	def update_point (self, point_id: str, **changes: typing.Any) -> typing.Optional[AutomationPoint]:

		"""Change fields of a point in place. Returns the point, or ``None`` when missing."""

		point = self.find_point(point_id)

		if point is None:
			return None

		for field_name, field_value in changes.items():

			if not hasattr(point, field_name):
				raise AttributeError(f"AutomationPoint has no field {field_name!r}")

			setattr(point, field_name, field_value)

		point.curve_type = CurveType(point.curve_type)

		return point

	def value_at (self, beat: float) -> float:

		"""Normalised value at ``beat``, see :func:`get_value_at_beat`."""

		return get_value_at_beat(self, beat)

	def param_value_at (self, beat: float) -> float:

		"""Value at ``beat`` in parameter units."""

		return normalized_to_param_value(self.value_at(beat), self.min_value, self.max_value)


def create_lane (target: AutomationTarget, min_value: float = 0.0, max_value: float = 1.0) -> AutomationLane:

	"""Create an empty lane for ``target``."""

	return AutomationLane(target=target, min_value=min_value, max_value=max_value)


def create_point (beat: float, value: float, curve_type: CurveType = CurveType.SMOOTH) -> AutomationPoint:

	"""Create a control point with a fresh id."""

	return AutomationPoint(beat=beat, value=value, curve_type=curve_type)


def interpolate_segment (p1: AutomationPoint, p2: AutomationPoint, t: float) -> float:

	"""
	Value at progress ``t`` between two points, shaped by ``p1.curve_type``.

	Bezier segments use ``p1.bezier_out`` and ``p2.bezier_in`` as value offsets
	from their anchors and fall back to the smooth curve when either is missing.
	"""

	if p1.curve_type == CurveType.BEZIER:

		if p1.bezier_out is not None and p2.bezier_in is not None:
			return notegrid.easing.cubic_bezier(
				p1.value,
				p1.value + p1.bezier_out.value,
				p2.value + p2.bezier_in.value,
				p2.value,
				t,
			)

		return notegrid.easing.interpolate(p1.value, p2.value, t, "smooth")

	return notegrid.easing.interpolate(p1.value, p2.value, t, p1.curve_type.value)


def get_value_at_beat (lane: AutomationLane, beat: float) -> float:

	"""
	Evaluate a lane at ``beat``.

	A lane without points reads 0.5 and a single point holds its value
	everywhere. Beats before the first or after the last point take that
	point's value.
	"""

	points = lane.sorted_points()

	if not points:
		return notegrid.constants.DEFAULT_AUTOMATION_VALUE

	if len(points) == 1 or beat <= points[0].beat:
		return points[0].value

	if beat >= points[-1].beat:
		return points[-1].value

	for p1, p2 in zip(points, points[1:]):

		if p1.beat <= beat <= p2.beat:

			span = p2.beat - p1.beat

			if span <= 0:
				return p2.value

			return interpolate_segment(p1, p2, (beat - p1.beat) / span)

	return notegrid.constants.DEFAULT_AUTOMATION_VALUE


def sample_lane (lane: AutomationLane, start: float, end: float, resolution: float) -> typing.List[typing.Tuple[float, float]]:

	"""
	Evaluate a lane every ``resolution`` beats from ``start`` to ``end`` inclusive.

	Returns ``(beat, normalised value)`` pairs.
	"""

	if resolution <= 0:
		raise ValueError(f"Resolution must be positive, got {resolution}")

	samples: typing.List[typing.Tuple[float, float]] = []
	count = int((end - start) / resolution + 1e-9)

	for i in range(count + 1):
		beat = start + i * resolution
		samples.append((beat, get_value_at_beat(lane, beat)))

	return samples


def normalized_to_param_value (normalized: float, min_value: float, max_value: float) -> float:

	"""Convert a normalised value to parameter units."""

	return min_value + normalized * (max_value - min_value)


def param_value_to_normalized (value: float, min_value: float, max_value: float) -> float:

	"""Convert a parameter value to [0, 1]. A zero-width range reads 0.5."""

	if max_value == min_value:
		return notegrid.constants.DEFAULT_AUTOMATION_VALUE

	return (value - min_value) / (max_value - min_value)


def snap_beat_to_grid (beat: float, grid_size: float) -> float:

	"""Snap a beat to the nearest multiple of ``grid_size``. Non-positive grids leave it alone."""

	if grid_size <= 0:
		return beat

	return round(beat / grid_size) * grid_size


def snap_value (value: float, value_snap: float) -> float:

	"""Snap a normalised value to ``value_snap`` increments and clamp it to [0, 1]."""

	if value_snap > 0:
		value = round(value / value_snap) * value_snap

	return max(0.0, min(1.0, value))


def _to_fixed (value: float, digits: int) -> str:

	"""Fixed-point formatting with ties rounded away from zero."""

	quantum = decimal.Decimal(1).scaleb(-digits)

	return str(decimal.Decimal(value).quantize(quantum, rounding=decimal.ROUND_HALF_UP))


def generate_fade_code (lane: AutomationLane) -> str:

	"""
	Generate one ``fade()`` call per consecutive pair of points.

	Values are written in parameter units with three decimals and durations
	in beats with two. A segment that does not start at beat 0 is preceded by
	a ``// At beat N:`` comment. Returns an empty string for fewer than two points.

	Example:
		```python
		lane = create_lane(AutomationTarget(EntityType.GROUP, "drums", "amp"))
		lane.add_point(0, 0.0)
		lane.add_point(4, 0.8)
		generate_fade_code(lane)
		# 'group("drums").fade("amp", 0.000, 0.800, 4.00);'
		```
	"""

	points = lane.sorted_points()

	if len(points) < 2:
		logger.debug(f"Lane {lane.label!r} has fewer than two points, no fade code generated")
		return ""

	target = lane.target
	fades: typing.List[str] = []

	for p1, p2 in zip(points, points[1:]):

		start = normalized_to_param_value(p1.value, lane.min_value, lane.max_value)
		end = normalized_to_param_value(p2.value, lane.min_value, lane.max_value)
		duration = p2.beat - p1.beat

		fade = (
			f'{target.entity_type.call(target.name)}.fade("{target.param}", '
			f"{_to_fixed(start, 3)}, {_to_fixed(end, 3)}, {_to_fixed(duration, 2)});"
		)

		if p1.beat > 0:
			fade = f"// At beat {_to_fixed(p1.beat, 2)}:\n{fade}"

		fades.append(fade)

	return "\n\n".join(fades)


def parse_fade_code (
	code: str,
	target: AutomationTarget,
	min_value: float = 0.0,
	max_value: float = 1.0
) -> typing.List[AutomationPoint]:

	"""
	Rebuild control points from the ``fade()`` calls for ``target`` in ``code``.

	Calls are read in source order and laid end to end from beat 0: each adds
	a start and an end point with the smooth curve. Values are normalised
	against ``[min_value, max_value]`` (the default range leaves them as
	written). Points within 0.001 beats of an earlier point are dropped, so
	contiguous fades share their joints.

	Returns an empty list when no call matches.
	"""

	pattern = target.entity_type.fade_pattern(target.name, target.param)

	points: typing.List[AutomationPoint] = []
	current_beat = 0.0

	for match in pattern.finditer(code):

		start_value, end_value, duration = (float(group) for group in match.groups())

		points.append(create_point(current_beat, param_value_to_normalized(start_value, min_value, max_value)))
		current_beat += duration
		points.append(create_point(current_beat, param_value_to_normalized(end_value, min_value, max_value)))

	if not points:
		logger.debug(f"No fade calls found for {target.entity_type.value} {target.label!r}")
		return []

	unique: typing.List[AutomationPoint] = []

	for point in points:
		if all(abs(point.beat - kept.beat) >= notegrid.constants.POINT_DEDUPE_EPSILON for kept in unique):
			unique.append(point)

	return unique


def _num (value: float) -> str:

	"""Compact number formatting for path data (``4`` rather than ``4.0``)."""

	return str(int(value)) if float(value).is_integer() else repr(float(value))


def generate_curve_path (points: typing.Sequence[AutomationPoint], width: float, height: float, max_beats: float) -> str:

	"""
	SVG path data drawing the curve through ``points``.

	Beats map to x across ``width`` (``max_beats`` at the right edge) and
	values to y with 1.0 at the top. Segment geometry follows the curve type
	of its first point: straight lines, steps, S-curves, a quadratic for
	exponential segments, and the point handles for Bezier segments.
	"""

	if max_beats <= 0:
		raise ValueError(f"max_beats must be positive, got {max_beats}")

	ordered = sorted(points, key=lambda point: point.beat)

	if not ordered:
		return ""

	def beat_to_x (beat: float) -> float:
		return (beat / max_beats) * width

	def value_to_y (value: float) -> float:
		return height - value * height

	path = [f"M {_num(beat_to_x(ordered[0].beat))} {_num(value_to_y(ordered[0].value))}"]

	for p1, p2 in zip(ordered, ordered[1:]):

		x1, y1 = beat_to_x(p1.beat), value_to_y(p1.value)
		x2, y2 = beat_to_x(p2.beat), value_to_y(p2.value)

		curve = p1.curve_type

		if curve == CurveType.BEZIER and p1.bezier_out is not None and p2.bezier_in is not None:
			cp1x = x1 + beat_to_x(p1.bezier_out.beat)
			cp1y = y1 - p1.bezier_out.value * height
			cp2x = x2 + beat_to_x(p2.bezier_in.beat)
			cp2y = y2 - p2.bezier_in.value * height
			path.append(f"C {_num(cp1x)} {_num(cp1y)}, {_num(cp2x)} {_num(cp2y)}, {_num(x2)} {_num(y2)}")

		elif curve in (CurveType.SMOOTH, CurveType.BEZIER):
			mid_x = x1 + (x2 - x1) * 0.5
			path.append(f"C {_num(mid_x)} {_num(y1)}, {_num(mid_x)} {_num(y2)}, {_num(x2)} {_num(y2)}")

		elif curve == CurveType.STEP:
			path.append(f"L {_num(x2)} {_num(y1)} L {_num(x2)} {_num(y2)}")

		elif curve == CurveType.EXPONENTIAL:
			control_x = x1 + (x2 - x1) * 0.7
			path.append(f"Q {_num(control_x)} {_num(y2)}, {_num(x2)} {_num(y2)}")

		else:
			path.append(f"L {_num(x2)} {_num(y2)}")

	return " ".join(path)


def generate_filled_path (points: typing.Sequence[AutomationPoint], width: float, height: float, max_beats: float) -> str:

	"""The curve path closed along the bottom edge, for drawing a filled area."""

	curve_path = generate_curve_path(points, width, height, max_beats)

	if not curve_path:
		return ""

	beats = [point.beat for point in points]
	first_x = _num(min(beats) / max_beats * width)
	last_x = _num(max(beats) / max_beats * width)

	return f"{curve_path} L {last_x} {_num(height)} L {first_x} {_num(height)} Z"
