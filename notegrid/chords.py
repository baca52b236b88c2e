"""Chord suffixes, chord tones and chord detection.

Chord notation attaches a quality suffix to a note or scale degree with a
colon: ``"C4:maj7"``, ``"A3:m"``, ``"5:7"``. The suffix selects an interval
list from :data:`CHORD_INTERVALS`; unknown suffixes fall back to the root
note alone.

The inverse, :func:`detect_chord`, names a set of simultaneous MIDI notes so
that a piano-roll chord can be written back as ``Root:quality``.

Module-level constants:
- ``CHORD_INTERVALS``: suffix -> semitones above the root (aliases included)
- ``CHORD_DETECTION_ORDER``: the canonical suffixes tried by detection, most
  specific first (7th chords, then 6/add9, then triads, then the power dyad)
"""

import dataclasses
import logging
import typing

import notegrid.pitch


logger = logging.getLogger(__name__)


CHORD_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"maj": [0, 4, 7],
	"major": [0, 4, 7],
	"min": [0, 3, 7],
	"m": [0, 3, 7],
	"minor": [0, 3, 7],
	"dim": [0, 3, 6],
	"diminished": [0, 3, 6],
	"aug": [0, 4, 8],
	"augmented": [0, 4, 8],
	"sus2": [0, 2, 7],
	"sus4": [0, 5, 7],
	"maj7": [0, 4, 7, 11],
	"major7": [0, 4, 7, 11],
	"7": [0, 4, 7, 10],
	"dom7": [0, 4, 7, 10],
	"min7": [0, 3, 7, 10],
	"m7": [0, 3, 7, 10],
	"dim7": [0, 3, 6, 9],
	"m7b5": [0, 3, 6, 10],
	"mmaj7": [0, 3, 7, 11],
	"9": [0, 4, 7, 10, 14],
	"maj9": [0, 4, 7, 11, 14],
	"m9": [0, 3, 7, 10, 14],
	"add9": [0, 4, 7, 14],
	"6": [0, 4, 7, 9],
	"m6": [0, 3, 7, 9],
	"5": [0, 7],
	"power": [0, 7],
}

CHORD_DETECTION_ORDER: typing.List[str] = [
	# 7th chords
	"maj7",
	"7",
	"m7",
	"dim7",
	"m7b5",
	"mmaj7",
	"add9",
	"6",
	"m6",
	# Triads
	"maj",
	"min",
	"dim",
	"aug",
	"sus2",
	"sus4",
	# Dyads
	"5",
]


@dataclasses.dataclass(frozen=True)
class DetectedChord:

	"""
	A named chord: the MIDI note of its root and its quality suffix.
	"""

	root: int
	quality: str

	def notation (self) -> str:

		"""Chord token as written in melody notation, e.g. ``"C4:maj"``."""

		return f"{notegrid.pitch.midi_to_note_name(self.root)}:{self.quality}"


def _pitch_class_set (intervals: typing.Iterable[int]) -> typing.List[int]:

	return sorted({interval % 12 for interval in intervals})


# Detection compares reduced interval sets, so precompute them once.
_DETECTION_SETS: typing.List[typing.Tuple[str, typing.List[int]]] = [
	(quality, _pitch_class_set(CHORD_INTERVALS[quality])) for quality in CHORD_DETECTION_ORDER
]


def chord_tones (root_midi: int, quality: typing.Optional[str]) -> typing.List[int]:

	"""
	MIDI notes of a chord built on ``root_midi``.

	The quality lookup is case-insensitive. ``None`` or an unknown quality
	yields the root alone. Tones outside 0-127 are dropped.

	Example:
		```python
		chord_tones(60, "maj7")    # [60, 64, 67, 71]
		chord_tones(60, "mystery") # [60]
		```
	"""

	if not quality:
		return [root_midi]

	intervals = CHORD_INTERVALS.get(quality.lower())

	if intervals is None:
		logger.debug(f"Unknown chord quality {quality!r}, using the root note only")
		return [root_midi]

	return [root_midi + interval for interval in intervals if notegrid.pitch.is_valid_midi(root_midi + interval)]


def parse_note_or_chord (text: str) -> typing.Optional[typing.List[int]]:

	"""
	Resolve ``"C4"`` or ``"C4:maj7"`` to MIDI notes.

	Returns ``None`` when the note part cannot be parsed.
	"""

	note_part, _, quality = text.partition(":")

	root = notegrid.pitch.note_name_to_midi(note_part)

	if root is None:
		return None

	return chord_tones(root, quality or None)


def _match_quality (pitch_classes: typing.List[int]) -> typing.Optional[str]:

	for quality, chord_set in _DETECTION_SETS:
		if chord_set == pitch_classes:
			return quality

	return None


def detect_chord (midi_notes: typing.Iterable[int]) -> typing.Optional[DetectedChord]:

	"""
	Name the chord formed by a set of simultaneous MIDI notes.

	The notes are reduced to pitch classes above the lowest note and compared
	for exact equality against :data:`CHORD_DETECTION_ORDER`. When the lowest
	note is not a root, each higher note is tried as the root in turn so that
	inversions are recognised; the reported root is placed in the octave of
	the lowest note.

	Returns ``None`` for fewer than two notes or an unknown shape.

	Example:
		```python
		detect_chord([60, 64, 67])      # DetectedChord(root=60, quality="maj")
		detect_chord([60, 63, 67, 70])  # DetectedChord(root=60, quality="m7")
		detect_chord([64, 67, 72])      # DetectedChord(root=60, quality="maj")
		```
	"""

	ordered = sorted(midi_notes)

	if len(ordered) < 2:
		return None

	lowest = ordered[0]

	quality = _match_quality(_pitch_class_set(note - lowest for note in ordered))

	if quality is not None:
		return DetectedChord(root=lowest, quality=quality)

	for candidate in ordered[1:]:

		root_class = candidate % 12
		quality = _match_quality(_pitch_class_set(note - root_class for note in ordered))

		if quality is not None:
			return DetectedChord(root=lowest - (lowest % 12) + root_class, quality=quality)

	return None
