"""Render grids and automation lanes as standard MIDI data.

Melody and pattern grids become single-track ``mido.MidiFile`` objects with
a tempo meta message; automation lanes become ``mido.MidiTrack`` objects of
control change messages that can be appended to such a file::

	midi_file = notegrid.midi_export.melody_to_midi(grid, bpm=110)
	midi_file.tracks.append(notegrid.midi_export.automation_to_cc(lane, control=74))
	notegrid.midi_export.save(midi_file, "melody.mid")
"""

import logging
import math
import typing

import mido

import notegrid.automation
import notegrid.constants
import notegrid.constants.velocity
import notegrid.melody
import notegrid.rhythm


logger = logging.getLogger(__name__)


DEFAULT_TICKS_PER_BEAT = 480
DEFAULT_DRUM_PITCH = 36
DRUM_CHANNEL = 9
MAX_CC_VALUE = 127

# Sort key rank for events on the same tick: note-offs go first.
_NOTE_OFF = 0
_NOTE_ON = 1

_Event = typing.Tuple[int, int, mido.Message]


def _round_half_up (value: float) -> int:

	return int(math.floor(value + 0.5))


def _clamp_velocity (velocity: int) -> int:

	return max(notegrid.constants.velocity.MIN_VELOCITY, min(notegrid.constants.velocity.MAX_VELOCITY, velocity))


def _beat_to_tick (beat: float, ticks_per_beat: int) -> int:

	return max(0, _round_half_up(beat * ticks_per_beat))


def _note_events (start: float, end: float, pitch: int, velocity: int, channel: int, ticks_per_beat: int) -> typing.List[_Event]:

	return [
		(_beat_to_tick(start, ticks_per_beat), _NOTE_ON, mido.Message("note_on", note=pitch, velocity=velocity, channel=channel)),
		(_beat_to_tick(end, ticks_per_beat), _NOTE_OFF, mido.Message("note_off", note=pitch, velocity=0, channel=channel)),
	]


def _build_file (events: typing.List[_Event], bpm: float, ticks_per_beat: int, name: typing.Optional[str]) -> mido.MidiFile:

	"""Single-track file with a tempo message followed by ``events`` as delta times."""

	midi_file = mido.MidiFile(type=1, ticks_per_beat=ticks_per_beat)
	track = mido.MidiTrack()
	midi_file.tracks.append(track)

	if name:
		track.append(mido.MetaMessage("track_name", name=name, time=0))

	track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))

	events.sort(key=lambda event: (event[0], event[1]))

	last_tick = 0

	for tick, _, message in events:
		message.time = tick - last_tick
		track.append(message)
		last_tick = tick

	return midi_file


def melody_to_midi (
	grid: notegrid.melody.MelodyGrid,
	bpm: float = notegrid.constants.DEFAULT_BPM,
	channel: int = 0,
	ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
	name: typing.Optional[str] = None
) -> mido.MidiFile:

	"""
	Render a melody grid as a one-track MIDI file.

	Note velocities (0.0-1.0) are scaled to 1-127. On equal ticks note-offs
	are written before note-ons, so repeated notes retrigger cleanly.

	Parameters:
		grid: The melody to render.
		bpm: Tempo written to the track.
		channel: MIDI channel (0-15).
		ticks_per_beat: File resolution.
		name: Optional track name.
	"""

	events: typing.List[_Event] = []

	for note in grid.notes:

		velocity = _clamp_velocity(_round_half_up(note.velocity * notegrid.constants.velocity.MAX_VELOCITY))
		events.extend(_note_events(note.start_beat, note.end_beat, note.midi_note, velocity, channel, ticks_per_beat))

	logger.debug(f"Rendering {len(grid.notes)} melody notes at {bpm} BPM")

	return _build_file(events, bpm, ticks_per_beat, name)


def pattern_to_midi (
	grid: notegrid.rhythm.PatternGrid,
	pitch: int = DEFAULT_DRUM_PITCH,
	bpm: float = notegrid.constants.DEFAULT_BPM,
	channel: int = DRUM_CHANNEL,
	ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
	name: typing.Optional[str] = None
) -> mido.MidiFile:

	"""
	Render a rhythm grid as a one-track MIDI file, every hit one step long.

	Accented hits play at velocity 127 and other hits at ``velocity * 100``,
	so a plain ``x`` is the default velocity of 100.
	"""

	step_beats = grid.beats_per_bar / grid.steps_per_bar
	events: typing.List[_Event] = []

	for step_index in grid.hit_indices():

		step = grid.steps[step_index]

		if step.accent:
			velocity = notegrid.constants.velocity.ACCENT_VELOCITY
		else:
			velocity = _clamp_velocity(_round_half_up(step.velocity * notegrid.constants.velocity.DEFAULT_VELOCITY))

		start = notegrid.rhythm.step_to_beat(grid, step_index)
		events.extend(_note_events(start, start + step_beats, pitch, velocity, channel, ticks_per_beat))

	logger.debug(f"Rendering {len(events) // 2} pattern hits at {bpm} BPM")

	return _build_file(events, bpm, ticks_per_beat, name)


def automation_to_cc (
	lane: notegrid.automation.AutomationLane,
	control: int,
	channel: int = 0,
	resolution: float = notegrid.constants.DEFAULT_GRID_SNAP,
	ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
	end_beat: typing.Optional[float] = None
) -> mido.MidiTrack:

	"""
	Sample an automation lane into control change messages.

	The lane is evaluated every ``resolution`` beats from beat 0 to
	``end_beat`` (the last point by default). A message is written only when
	the 0-127 value differs from the previous one.
	"""

	track = mido.MidiTrack()

	if not lane.points:
		logger.debug(f"Lane {lane.label!r} has no points, no controller data written")
		return track

	end = end_beat if end_beat is not None else max(point.beat for point in lane.points)

	last_tick = 0
	last_value: typing.Optional[int] = None

	for beat, normalized in notegrid.automation.sample_lane(lane, 0.0, end, resolution):

		value = max(0, min(MAX_CC_VALUE, _round_half_up(normalized * MAX_CC_VALUE)))

		if value == last_value:
			continue

		tick = _beat_to_tick(beat, ticks_per_beat)
		track.append(mido.Message("control_change", control=control, value=value, channel=channel, time=tick - last_tick))

		last_tick = tick
		last_value = value

	return track


def save (midi_file: mido.MidiFile, path: str) -> None:

	"""Write a MIDI file to ``path``."""

	event_count = sum(len(track) for track in midi_file.tracks)

	logger.info(f"Saving MIDI file ({event_count} events) to {path}...")

	midi_file.save(path)

	logger.info(f"Saved {path}")
