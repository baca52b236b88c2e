"""Scale tables and scale-degree resolution.

Melody notation may use scale degrees ``1``-``7`` instead of note names when
the melody is given a scale and root (``"1 3 5 8"`` in C major is C E G ...).
Each scale maps the seven degrees onto semitone offsets from the root;
shorter scales (pentatonic, blues) continue into the next octave so that
every degree has a tone.

Custom scales are registered into a process-scoped registry that sits on top
of the built-in table. :func:`clear_custom_scales` drops every registration,
which keeps tests independent of each other.
"""

import logging
import typing

import notegrid.chords
import notegrid.constants
import notegrid.pitch


logger = logging.getLogger(__name__)


DEFAULT_SCALE = "major"


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 2, 4, 5, 7, 9, 11],
	"ionian": [0, 2, 4, 5, 7, 9, 11],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"natural_minor": [0, 2, 3, 5, 7, 8, 10],
	"aeolian": [0, 2, 3, 5, 7, 8, 10],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"locrian": [0, 1, 3, 5, 6, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
	"pentatonic": [0, 2, 4, 7, 9, 12, 14],
	"minor_pentatonic": [0, 3, 5, 7, 10, 12, 15],
	"blues": [0, 3, 5, 6, 7, 10, 12],
}


_custom_scales: typing.Dict[str, typing.List[int]] = {}


def register_scale (name: str, intervals: typing.Sequence[int]) -> None:

	"""Register a custom scale for scale-degree resolution.

	Parameters:
		name: Scale name; matched case-insensitively. A custom scale may
			shadow a built-in one until :func:`clear_custom_scales` is called.
		intervals: Semitone offsets from the root, starting at 0 and strictly
			ascending.

	Raises:
		ValueError: If the name is empty or the intervals are invalid.

	Example:
		```python
		register_scale("hirajoshi", [0, 2, 3, 7, 8])
		resolve_scale_degree(4, None, "hirajoshi", "D4")  # [69]
		```
	"""

	key = name.strip().lower()

	if not key:
		raise ValueError("Scale name cannot be empty")

	values = list(intervals)

	if not values or values[0] != 0:
		raise ValueError(f"Scale {name!r} must start at interval 0, got {values}")

	if any(b <= a for a, b in zip(values, values[1:])):
		raise ValueError(f"Scale {name!r} intervals must be strictly ascending, got {values}")

	_custom_scales[key] = values
	logger.debug(f"Registered scale {key!r}: {values}")


def clear_custom_scales () -> None:

	"""Remove every registered custom scale, leaving the built-in table."""

	_custom_scales.clear()


def available_scales () -> typing.List[str]:

	"""Sorted names of built-in and registered scales."""

	return sorted(set(SCALE_INTERVALS) | set(_custom_scales))


def get_scale_intervals (scale: str) -> typing.List[int]:

	"""
	Semitone offsets for a scale name, falling back to major when unknown.
	"""

	key = scale.strip().lower()

	if key in _custom_scales:
		return list(_custom_scales[key])

	if key in SCALE_INTERVALS:
		return list(SCALE_INTERVALS[key])

	logger.debug(f"Unknown scale {scale!r}, falling back to {DEFAULT_SCALE}")

	return list(SCALE_INTERVALS[DEFAULT_SCALE])


def resolve_scale_degree (degree: int, quality: typing.Optional[str], scale: str, root: str) -> typing.List[int]:

	"""
	Resolve a 1-based scale degree to MIDI note(s).

	Degrees wrap modulo the scale length. A chord ``quality`` is stacked on
	the resolved scale tone rather than on the root. A root that does not
	parse falls back to C4.

	Example:
		```python
		resolve_scale_degree(3, None, "major", "C4")    # [64]
		resolve_scale_degree(5, "7", "minor", "A3")     # [64, 68, 71, 74]
		```
	"""

	intervals = get_scale_intervals(scale)

	root_midi = notegrid.pitch.note_name_to_midi(root)

	if root_midi is None:
		logger.debug(f"Unparseable scale root {root!r}, using C4")
		root_midi = notegrid.constants.DEFAULT_ROOT_MIDI

	tone = root_midi + intervals[(degree - 1) % len(intervals)]

	return notegrid.chords.chord_tones(tone, quality)
