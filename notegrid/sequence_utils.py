import typing

T = typing.TypeVar("T")


def generate_bresenham_sequence (steps: int, pulses: int) -> typing.List[int]:

	"""
	Distribute pulses across steps with a running bucket.

	Each step adds ``pulses`` to the bucket; whenever the bucket reaches
	``steps`` a hit is emitted and ``steps`` is subtracted. This spreads the
	hits as evenly as the grid allows, e.g. ``(8, 3) -> [1, 0, 0, 1, 0, 0, 1, 0]``.

	The bucket starts at ``steps - pulses`` so the first step is always a hit.
	"""

	if steps <= 0:
		return []

	if pulses >= steps:
		return [1] * steps

	if pulses <= 0:
		return [0] * steps

	sequence = [0] * steps
	bucket = steps - pulses

	for i in range(steps):
		bucket += pulses
		if bucket >= steps:
			sequence[i] = 1
			bucket -= steps

	return sequence


def sequence_to_indices (sequence: typing.Sequence[int]) -> typing.List[int]:

	"""Extract step indices where hits occur in a binary sequence."""

	return [i for i, v in enumerate(sequence) if v]


def roll (items: typing.Sequence[T], shift: int) -> typing.List[T]:

	"""Rotate a sequence to the right by ``shift`` places, wrapping around.

	Negative shifts rotate left. The shift is normalized modulo the length.
	"""

	length = len(items)

	if length == 0:
		return []

	offset = shift % length

	return [items[(i - offset) % length] for i in range(length)]


def proportional_index (index: int, source_length: int, target_length: int) -> int:

	"""Map a slot index in a grid of ``target_length`` onto a grid of ``source_length``.

	Nearest-lower proportional mapping, ``floor(index * source / target)``.
	No interpolation happens, so bars of mismatched length resample without
	error: shorter bars repeat slots and longer bars skip them.
	"""

	if target_length <= 0:
		raise ValueError(f"Target length must be positive, got {target_length}")

	return (index * source_length) // target_length


def resample (items: typing.Sequence[T], length: int) -> typing.List[T]:

	"""Resample a sequence onto exactly ``length`` slots using :func:`proportional_index`."""

	if len(items) == length:
		return list(items)

	return [items[proportional_index(i, len(items), length)] for i in range(length)]


def clamp (value: float, low: float, high: float) -> float:

	"""Clamp ``value`` into ``[low, high]``."""

	return max(low, min(high, value))
