"""Melody grid codec.

Parses melody strings into a piano-roll note list (:class:`MelodyGrid`) and
generates melody strings back from one.

**Syntax:**

- ``C4``, ``F#3``, ``Bb2``: a note (octave defaults to 4)
- ``C4:maj7``: a chord built on the note
- ``1``-``7``, ``5:7``: scale degrees, resolved when the grid has a scale and root
- ``-``: tie, extends the previous note by one slot
- ``.`` or ``_``: rest
- ``|``: bar separator

Tokens inside a bar share the bar equally, so ``"C4 - - ."`` in a 4-beat bar
is a three-beat C followed by a one-beat rest.

The text format holds one note or chord per time slot, so a polyphonic grid
is written as several *lanes* (see :func:`split_into_lanes`), one melody
string per lane.
"""

import dataclasses
import logging
import math
import typing

import notegrid.bars
import notegrid.chords
import notegrid.constants
import notegrid.intervals
import notegrid.pitch


logger = logging.getLogger(__name__)


TIE = "-"
REST_CHARS = frozenset("._")
REST = "."

# Step boundary tolerance for notes whose start was produced by float division.
_BOUNDARY_EPSILON = 1e-9


@dataclasses.dataclass
class MelodyNote:

	"""
	A note on the piano roll, positioned in beats.
	"""

	start_beat: float
	duration: float
	midi_note: int
	velocity: float = 1.0
	is_chord_tone: bool = False

	@property
	def end_beat (self) -> float:

		"""Beat at which the note stops sounding."""

		return self.start_beat + self.duration

	def overlaps (self, other: "MelodyNote") -> bool:

		"""True when the two notes sound at the same time."""

		return self.start_beat < other.end_beat and other.start_beat < self.end_beat


@dataclasses.dataclass
class MelodyConfig:

	"""
	Dimensions and optional scale context for a melody.
	"""

	num_bars: int = notegrid.constants.DEFAULT_NUM_BARS
	beats_per_bar: float = notegrid.constants.DEFAULT_BEATS_PER_BAR
	scale: typing.Optional[str] = None
	root: typing.Optional[str] = None


@dataclasses.dataclass
class MelodyGrid:

	"""
	An unordered collection of notes spanning ``num_bars`` bars.
	"""

	notes: typing.List[MelodyNote]
	num_bars: int
	beats_per_bar: float = notegrid.constants.DEFAULT_BEATS_PER_BAR
	scale: typing.Optional[str] = None
	root: typing.Optional[str] = None

	@property
	def total_beats (self) -> float:

		"""Length of the grid in beats."""

		return self.num_bars * self.beats_per_bar


@dataclasses.dataclass
class MelodyStats:

	"""Summary of a grid's pitch content."""

	count: int
	lowest: typing.Optional[int] = None
	highest: typing.Optional[int] = None
	lowest_name: typing.Optional[str] = None
	highest_name: typing.Optional[str] = None
	range: int = 0


@dataclasses.dataclass
class Token:

	"""
	One melody token.

	``kind`` is ``"note"`` (with resolved ``notes``), ``"degree"`` (a scale
	degree that could not be resolved yet), ``"tie"`` or ``"rest"``.
	"""

	kind: str
	notes: typing.List[int] = dataclasses.field(default_factory=list)
	degree: typing.Optional[int] = None
	quality: typing.Optional[str] = None


def _read_quality (bar: str, i: int) -> typing.Tuple[typing.Optional[str], int]:

	"""Read an optional ``:quality`` suffix starting at ``bar[i]``."""

	if i >= len(bar) or bar[i] != ":":
		return None, i

	i += 1
	start = i

	while i < len(bar) and bar[i].isascii() and bar[i].isalnum():
		i += 1

	return (bar[start:i] or None), i


def tokenize_bar (bar: str, scale: typing.Optional[str] = None, root: typing.Optional[str] = None) -> typing.List[Token]:

	"""
	Scan one bar into tokens.

	Scale degrees resolve immediately when both ``scale`` and ``root`` are
	given and stay ``degree`` tokens otherwise. Unknown characters and notes
	outside the MIDI range are skipped.
	"""

	tokens: typing.List[Token] = []
	i = 0

	while i < len(bar):

		ch = bar[i]

		if ch.isspace():
			i += 1
			continue

		if ch == TIE:
			tokens.append(Token("tie"))
			i += 1
			continue

		if ch in REST_CHARS:
			tokens.append(Token("rest"))
			i += 1
			continue

		if ch in "1234567":

			degree = int(ch)
			quality, i = _read_quality(bar, i + 1)

			if scale and root:
				tokens.append(Token("note", notes=notegrid.intervals.resolve_scale_degree(degree, quality, scale, root)))
			else:
				tokens.append(Token("degree", degree=degree, quality=quality))

			continue

		if ch.upper() in notegrid.pitch.NOTE_BASES:

			start = i
			i += 1

			while i < len(bar):

				nxt = bar[i]

				# A dash is a negative octave only when a digit follows, otherwise it is a tie.
				if nxt == TIE and i + 1 < len(bar) and bar[i + 1].isdigit():
					i += 1
				elif nxt in "#b" or nxt.isdigit():
					i += 1
				else:
					break

			note_name = bar[start:i]
			quality, i = _read_quality(bar, i)

			notes = notegrid.chords.parse_note_or_chord(f"{note_name}:{quality}" if quality else note_name)

			if notes:
				tokens.append(Token("note", notes=notes))
			else:
				logger.debug(f"Skipping unresolvable note {note_name!r}")

			continue

		logger.debug(f"Skipping unknown melody character {ch!r}")
		i += 1

	return tokens


def parse (text: str, config: typing.Optional[MelodyConfig] = None) -> MelodyGrid:

	"""
	Parse a melody string into a :class:`MelodyGrid`.

	Parameters:
		text: Melody notation, bars separated by ``|``.
		config: Beats per bar and optional scale/root for degree tokens. The
			number of bars always comes from the text.

	Example:
		```python
		grid = parse("C4 - - . | E4 - - .")
		[(n.start_beat, n.duration, n.midi_note) for n in grid.notes]
		# [(0.0, 3.0, 60), (4.0, 3.0, 64)]
		```
	"""

	config = config or MelodyConfig()

	if config.beats_per_bar <= 0:
		raise ValueError(f"beats_per_bar must be positive, got {config.beats_per_bar}")

	bars = notegrid.bars.split_into_bars(text)

	if not bars:
		return create_empty_grid(MelodyConfig(
			num_bars = 1,
			beats_per_bar = config.beats_per_bar,
			scale = config.scale,
			root = config.root,
		))

	notes: typing.List[MelodyNote] = []

	pending: typing.List[int] = []
	pending_start = 0.0
	pending_duration = 0.0

	def commit () -> None:

		nonlocal pending

		for midi_note in pending:
			notes.append(MelodyNote(
				start_beat = pending_start,
				duration = pending_duration,
				midi_note = midi_note,
				velocity = 1.0,
				is_chord_tone = len(pending) > 1,
			))

		pending = []

	current_beat = 0.0

	for bar in bars:

		tokens = tokenize_bar(bar, config.scale, config.root)

		if not tokens:
			commit()
			current_beat += config.beats_per_bar
			continue

		slot = config.beats_per_bar / len(tokens)

		for index, token in enumerate(tokens):

			if token.kind == "tie":
				if pending:
					pending_duration += slot

			elif token.kind == "note":
				commit()
				pending = list(token.notes)
				pending_start = current_beat + index * slot
				pending_duration = slot

			else:
				# Rests, and degrees with no scale context to resolve them.
				if token.kind == "degree":
					logger.debug(f"Scale degree {token.degree} has no scale context, treating it as a rest")
				commit()

		current_beat += config.beats_per_bar

	commit()

	return MelodyGrid(
		notes = notes,
		num_bars = len(bars),
		beats_per_bar = config.beats_per_bar,
		scale = config.scale,
		root = config.root,
	)


def _step_token (starting: typing.List[MelodyNote]) -> str:

	"""Notation for the notes that start inside one step."""

	first = starting[0]

	chord = [
		note for note in starting
		if abs(note.start_beat - first.start_beat) < notegrid.constants.CHORD_EPSILON
		and abs(note.duration - first.duration) < notegrid.constants.CHORD_EPSILON
	]

	if len(chord) == 1:
		return notegrid.pitch.midi_to_note_name(chord[0].midi_note)

	midi_notes = [note.midi_note for note in chord]
	detected = notegrid.chords.detect_chord(midi_notes)

	if detected is not None:
		return detected.notation()

	return notegrid.pitch.midi_to_note_name(min(midi_notes))


def generate (grid: MelodyGrid, steps_per_bar: int = notegrid.constants.DEFAULT_MELODY_STEPS_PER_BAR) -> str:

	"""
	Generate a melody string from a grid, ``steps_per_bar`` tokens per bar.

	Each step writes the note (or named chord) starting in it, ``-`` while a
	note is held through it, or ``.`` when nothing sounds. Simultaneous notes
	with equal duration that do not form a known chord are written as their
	lowest note.
	"""

	if steps_per_bar <= 0:
		raise ValueError(f"steps_per_bar must be positive, got {steps_per_bar}")

	ordered = sorted(grid.notes, key=lambda note: note.start_beat)
	step_beats = grid.beats_per_bar / steps_per_bar

	bars: typing.List[str] = []

	for bar_index in range(grid.num_bars):

		bar_start = bar_index * grid.beats_per_bar
		tokens: typing.List[str] = []

		for step_index in range(steps_per_bar):

			step_start = bar_start + step_index * step_beats
			step_end = step_start + step_beats

			starting = [
				note for note in ordered
				if step_start - _BOUNDARY_EPSILON <= note.start_beat < step_end - _BOUNDARY_EPSILON
			]

			if starting:
				tokens.append(_step_token(starting))
				continue

			sustained = any(
				note.start_beat < step_start - _BOUNDARY_EPSILON and note.end_beat > step_start + _BOUNDARY_EPSILON
				for note in ordered
			)

			tokens.append(TIE if sustained else REST)

		bars.append(" ".join(tokens))

	return f" {notegrid.bars.BAR_SEPARATOR} ".join(bars)


def create_empty_grid (config: MelodyConfig) -> MelodyGrid:

	"""Create a grid with no notes."""

	return MelodyGrid(
		notes = [],
		num_bars = config.num_bars,
		beats_per_bar = config.beats_per_bar,
		scale = config.scale,
		root = config.root,
	)


def add_note (grid: MelodyGrid, note: MelodyNote) -> MelodyGrid:

	"""Return a grid with ``note`` appended."""

	return dataclasses.replace(grid, notes=grid.notes + [note])


def remove_note (grid: MelodyGrid, note_index: int) -> MelodyGrid:

	"""Return a grid without the note at ``note_index``."""

	notes = list(grid.notes)
	del notes[note_index]

	return dataclasses.replace(grid, notes=notes)


def update_note (grid: MelodyGrid, note_index: int, **changes: typing.Any) -> MelodyGrid:

	"""Return a grid where the note at ``note_index`` has the given fields replaced."""

	notes = list(grid.notes)
	notes[note_index] = dataclasses.replace(notes[note_index], **changes)

	return dataclasses.replace(grid, notes=notes)


def find_note_at (grid: MelodyGrid, beat: float, midi_note: int) -> typing.Optional[int]:

	"""Index of the note with pitch ``midi_note`` sounding at ``beat``, or ``None``."""

	for index, note in enumerate(grid.notes):
		if note.midi_note == midi_note and note.start_beat <= beat < note.end_beat:
			return index

	return None


def quantize_beat (beat: float, grid_size: float) -> float:

	"""Snap a beat to the nearest multiple of ``grid_size``."""

	if grid_size <= 0:
		return beat

	return math.floor(beat / grid_size + 0.5) * grid_size


def transpose (grid: MelodyGrid, semitones: int) -> MelodyGrid:

	"""Shift every note by ``semitones``, clamping to the MIDI range."""

	notes = [
		dataclasses.replace(
			note,
			midi_note = max(notegrid.constants.MIN_MIDI_NOTE, min(notegrid.constants.MAX_MIDI_NOTE, note.midi_note + semitones))
		)
		for note in grid.notes
	]

	return dataclasses.replace(grid, notes=notes)


def shift_time (grid: MelodyGrid, beats: float) -> MelodyGrid:

	"""
	Move every note by ``beats``.

	Starts are clamped at 0 and notes pushed past the end of the grid are dropped.
	"""

	notes = [
		dataclasses.replace(note, start_beat=max(0.0, note.start_beat + beats))
		for note in grid.notes
	]

	return dataclasses.replace(grid, notes=[note for note in notes if note.start_beat < grid.total_beats])


def melody_stats (grid: MelodyGrid) -> MelodyStats:

	"""Count and pitch range of the grid's notes."""

	if not grid.notes:
		return MelodyStats(count=0)

	pitches = [note.midi_note for note in grid.notes]
	lowest = min(pitches)
	highest = max(pitches)

	return MelodyStats(
		count = len(pitches),
		lowest = lowest,
		highest = highest,
		lowest_name = notegrid.pitch.midi_to_note_name(lowest),
		highest_name = notegrid.pitch.midi_to_note_name(highest),
		range = highest - lowest,
	)


def split_into_lanes (notes: typing.Iterable[MelodyNote]) -> typing.List[typing.List[MelodyNote]]:

	"""
	Split notes into lanes of non-overlapping notes.

	Greedy first-fit: notes are sorted by ``(start_beat, midi_note)`` and each
	goes into the first lane whose last note has ended by its start (within
	0.001 beats), opening a new lane when none has. Always returns at least
	one, possibly empty, lane.

	Notes that start together with equal length land in separate lanes, so
	each lane is strictly monophonic.
	"""

	ordered = sorted(notes, key=lambda note: (note.start_beat, note.midi_note))

	lanes: typing.List[typing.List[MelodyNote]] = []

	for note in ordered:

		for lane in lanes:
			if note.start_beat >= lane[-1].end_beat - notegrid.constants.LANE_EPSILON:
				lane.append(note)
				break

		else:
			lanes.append([note])

	return lanes or [[]]


def count_lanes (notes: typing.Iterable[MelodyNote]) -> int:

	"""Number of lanes :func:`split_into_lanes` needs for ``notes``."""

	return len(split_into_lanes(notes))


def generate_multi_lane (grid: MelodyGrid, steps_per_bar: int = notegrid.constants.DEFAULT_MELODY_STEPS_PER_BAR) -> typing.List[str]:

	"""One melody string per lane of the grid."""

	return [
		generate(dataclasses.replace(grid, notes=lane), steps_per_bar)
		for lane in split_into_lanes(grid.notes)
	]


def parse_multi_lane (lanes: typing.Sequence[str], config: typing.Optional[MelodyConfig] = None) -> MelodyGrid:

	"""
	Merge several melody strings into one grid.

	The grid is as long as the longest lane. With no lanes an empty grid of
	``config.num_bars`` bars is returned.
	"""

	config = config or MelodyConfig()

	if not lanes:
		return create_empty_grid(config)

	grids = [parse(lane, config) for lane in lanes]

	return MelodyGrid(
		notes = [note for lane_grid in grids for note in lane_grid.notes],
		num_bars = max(lane_grid.num_bars for lane_grid in grids),
		beats_per_bar = grids[0].beats_per_bar,
		scale = config.scale,
		root = config.root,
	)
