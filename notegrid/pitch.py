"""Note name and MIDI number conversion.

Convention: **C4 = 60** (Middle C). Note names are a letter ``A``-``G``,
any number of ``#`` (sharp) or ``b`` (flat) accidentals and an optional
signed octave, e.g. ``"C4"``, ``"F#3"``, ``"Bb2"``, ``"C-1"``. The octave
defaults to 4.
"""

import logging
import math
import re
import typing

import notegrid.constants


logger = logging.getLogger(__name__)


NOTE_BASES: typing.Dict[str, int] = {
	"C": 0,
	"D": 2,
	"E": 4,
	"F": 5,
	"G": 7,
	"A": 9,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

_MIDI_NUMBER = re.compile(r"^-?\d+$")
_OCTAVE = re.compile(r"^-?\d+")


def is_valid_midi (midi: int) -> bool:

	"""True when ``midi`` lies in the MIDI note range 0-127."""

	return notegrid.constants.MIN_MIDI_NOTE <= midi <= notegrid.constants.MAX_MIDI_NOTE


def note_name_to_midi (note_name: str) -> typing.Optional[int]:

	"""
	Parse a note name (or a bare MIDI number) into a MIDI note number.

	The name is upper-cased first, so a ``B`` is read as a flat only when it
	directly follows the note letter or a ``#``; otherwise it ends the
	accidentals. Returns ``None`` when the name cannot be parsed or the
	result falls outside 0-127.

	Example:
		```python
		note_name_to_midi("C4")   # 60
		note_name_to_midi("Bb3")  # 58
		note_name_to_midi("C#")   # 61 (octave defaults to 4)
		note_name_to_midi("G9")   # 127
		note_name_to_midi("H2")   # None
		```
	"""

	name = note_name.strip().upper()

	if not name:
		return None

	if _MIDI_NUMBER.match(name):
		number = int(name)
		return number if is_valid_midi(number) else None

	letter = name[0]

	if letter not in NOTE_BASES:
		return None

	semitone = NOTE_BASES[letter]
	idx = 1

	while idx < len(name):

		ch = name[idx]

		if ch == "#":
			semitone += 1

		elif ch == "B" and (name[idx - 1] in NOTE_BASES or name[idx - 1] == "#"):
			semitone -= 1

		else:
			break

		idx += 1

	octave = notegrid.constants.DEFAULT_OCTAVE
	octave_match = _OCTAVE.match(name[idx:])

	if octave_match:
		octave = int(octave_match.group(0))

	midi = (octave + 1) * 12 + semitone

	if not is_valid_midi(midi):
		logger.debug(f"Note {note_name!r} resolves to MIDI {midi}, outside 0-127")
		return None

	return midi


def midi_to_note_name (midi: int) -> str:

	"""Name a MIDI note with sharp spelling, e.g. ``61 -> "C#4"``."""

	octave = midi // 12 - 1

	return f"{PC_TO_NOTE_NAME[midi % 12]}{octave}"


def frequency_to_midi (frequency: float) -> int:

	"""Nearest MIDI note for a frequency in Hz, clamped to 0-127."""

	if frequency <= 0:
		raise ValueError(f"Frequency must be positive, got {frequency}")

	midi = round(notegrid.constants.A4_MIDI + 12 * math.log2(frequency / notegrid.constants.A4_FREQUENCY))

	return int(max(notegrid.constants.MIN_MIDI_NOTE, min(notegrid.constants.MAX_MIDI_NOTE, midi)))


def midi_to_frequency (midi: float) -> float:

	"""Equal-tempered frequency of a MIDI note, A4 = 440 Hz."""

	return notegrid.constants.A4_FREQUENCY * 2 ** ((midi - notegrid.constants.A4_MIDI) / 12)
