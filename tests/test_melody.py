import random
import typing

import pytest

import notegrid.melody


def _summary (grid: notegrid.melody.MelodyGrid) -> typing.List[typing.Tuple[float, float, int]]:

	return sorted((note.start_beat, note.duration, note.midi_note) for note in grid.notes)


def test_parse_ties_and_rests () -> None:

	"""Ties extend the note; the rest that follows ends it."""

	grid = notegrid.melody.parse("C4 - - . | E4 - - .", notegrid.melody.MelodyConfig(beats_per_bar=4))

	assert grid.num_bars == 2
	assert grid.total_beats == 8
	assert _summary(grid) == [(0.0, 3.0, 60), (4.0, 3.0, 64)]


def test_scenario_round_trip () -> None:

	"""The two-bar melody regenerates unchanged."""

	text = "C4 - - . | E4 - - ."

	assert notegrid.melody.generate(notegrid.melody.parse(text)) == text


def test_tokens_share_the_bar () -> None:

	"""Bars divide evenly among their own tokens."""

	grid = notegrid.melody.parse("C4 D4 | E4")

	assert _summary(grid) == [(0.0, 2.0, 60), (2.0, 2.0, 62), (4.0, 4.0, 64)]


def test_tie_carries_across_bars () -> None:

	"""A tie at the start of a bar extends the note from the previous bar."""

	text = "C4 - - - | - - . ."
	grid = notegrid.melody.parse(text)

	assert _summary(grid) == [(0.0, 6.0, 60)]
	assert notegrid.melody.generate(grid) == text


def test_leading_tie_is_ignored () -> None:

	"""A tie with nothing to extend does nothing."""

	assert _summary(notegrid.melody.parse("- C4 - .")) == [(1.0, 2.0, 60)]


def test_chord_token () -> None:

	"""A chord suffix creates simultaneous chord tones."""

	grid = notegrid.melody.parse("C4:maj - . .")

	assert _summary(grid) == [(0.0, 2.0, 60), (0.0, 2.0, 64), (0.0, 2.0, 67)]
	assert all(note.is_chord_tone for note in grid.notes)


def test_chord_is_named_on_generate () -> None:

	"""Simultaneous notes that form a known chord are written as Root:quality."""

	assert notegrid.melody.generate(notegrid.melody.parse("C4:maj - . .")) == "C4:maj - . ."
	assert notegrid.melody.generate(notegrid.melody.parse("A3:m7 . . .")) == "A3:m7 . . ."


def test_unknown_cluster_writes_lowest_note () -> None:

	"""Simultaneous notes that are not a known chord fall back to the lowest pitch."""

	grid = notegrid.melody.create_empty_grid(notegrid.melody.MelodyConfig())
	grid = notegrid.melody.add_note(grid, notegrid.melody.MelodyNote(0.0, 1.0, 61))
	grid = notegrid.melody.add_note(grid, notegrid.melody.MelodyNote(0.0, 1.0, 60))

	assert notegrid.melody.generate(grid) == "C4 . . ."


def test_accidentals_and_octaves () -> None:

	"""Lower-case flats, sharps and negative octaves tokenize as one note."""

	grid = notegrid.melody.parse("Bb3 F#5 db4 C-1")

	assert [note.midi_note for note in sorted(grid.notes, key=lambda note: note.start_beat)] == [58, 78, 61, 0]


def test_dash_after_note_is_a_tie () -> None:

	"""A dash not followed by a digit is a tie, even without a space."""

	assert _summary(notegrid.melody.parse("C- . .")) == [(0.0, 2.0, 60)]


def test_unknown_characters_are_skipped () -> None:

	"""Characters outside the grammar are ignored rather than rejected."""

	assert _summary(notegrid.melody.parse("C4 ? ? E4")) == [(0.0, 2.0, 60), (2.0, 2.0, 64)]


def test_scale_degrees () -> None:

	"""Degrees resolve against the configured scale and root."""

	config = notegrid.melody.MelodyConfig(scale="major", root="C4")
	grid = notegrid.melody.parse("1 3 5 -", config)

	assert _summary(grid) == [(0.0, 1.0, 60), (1.0, 1.0, 64), (2.0, 2.0, 67)]


def test_scale_degree_chord () -> None:

	"""A degree with a suffix becomes a chord on the scale tone."""

	config = notegrid.melody.MelodyConfig(scale="major", root="C4")
	grid = notegrid.melody.parse("5:7", config)

	assert sorted(note.midi_note for note in grid.notes) == [67, 71, 74, 77]


def test_degrees_without_scale_are_rests () -> None:

	"""Without scale context degree tokens produce no notes."""

	assert notegrid.melody.parse("1 2 3 4").notes == []


def test_tokenize_bar_keeps_unresolved_degrees () -> None:

	"""The tokenizer reports degrees it could not resolve."""

	tokens = notegrid.melody.tokenize_bar("3:m - _")

	assert [token.kind for token in tokens] == ["degree", "tie", "rest"]
	assert tokens[0].degree == 3
	assert tokens[0].quality == "m"


def test_empty_input () -> None:

	"""Empty text is one empty bar."""

	grid = notegrid.melody.parse("")

	assert grid.num_bars == 1
	assert grid.notes == []
	assert notegrid.melody.generate(grid) == ". . . ."


def test_invalid_beats_per_bar () -> None:

	"""Non-positive beats per bar raises ValueError."""

	with pytest.raises(ValueError):
		notegrid.melody.parse("C4", notegrid.melody.MelodyConfig(beats_per_bar=0))


def test_generate_finer_grid () -> None:

	"""More steps per bar write longer tie runs."""

	grid = notegrid.melody.parse("C4 - - .")

	assert notegrid.melody.generate(grid, steps_per_bar=8) == "C4 - - - - - . ."


def test_monophonic_round_trip () -> None:

	"""Quantized monophonic lines survive generate and parse."""

	rng = random.Random(7)

	for _ in range(20):

		notes = []
		beat = 0.0

		while True:
			beat += rng.choice([0.0, 0.25, 0.5])
			duration = rng.choice([0.25, 0.5, 1.0, 1.5])
			if beat + duration > 8.0:
				break
			notes.append(notegrid.melody.MelodyNote(beat, duration, rng.randint(36, 96)))
			beat += duration

		grid = notegrid.melody.MelodyGrid(notes=notes, num_bars=2)
		reparsed = notegrid.melody.parse(notegrid.melody.generate(grid, steps_per_bar=16))

		assert _summary(reparsed) == _summary(grid)


def test_editing_helpers_are_pure () -> None:

	"""Add, update and remove return new grids and keep the original."""

	grid = notegrid.melody.parse("C4 . . .")

	added = notegrid.melody.add_note(grid, notegrid.melody.MelodyNote(2.0, 1.0, 67))
	updated = notegrid.melody.update_note(added, 1, midi_note=69)
	removed = notegrid.melody.remove_note(updated, 0)

	assert len(grid.notes) == 1
	assert _summary(updated) == [(0.0, 1.0, 60), (2.0, 1.0, 69)]
	assert _summary(removed) == [(2.0, 1.0, 69)]


def test_find_note_at () -> None:

	"""Notes are found by pitch while they sound."""

	grid = notegrid.melody.parse("C4 - E4 .")

	assert notegrid.melody.find_note_at(grid, 1.5, 60) == 0
	assert notegrid.melody.find_note_at(grid, 2.0, 60) is None
	assert notegrid.melody.find_note_at(grid, 2.0, 64) == 1


def test_quantize_beat () -> None:

	"""Beats snap to the nearest grid line, halves rounding up."""

	assert notegrid.melody.quantize_beat(1.13, 0.25) == pytest.approx(1.25)
	assert notegrid.melody.quantize_beat(0.125, 0.25) == pytest.approx(0.25)
	assert notegrid.melody.quantize_beat(1.13, 0) == 1.13


def test_transpose_clamps () -> None:

	"""Transposition stays inside the MIDI range."""

	grid = notegrid.melody.parse("C4 G9 . .")

	assert [note.midi_note for note in notegrid.melody.transpose(grid, 2).notes] == [62, 127]
	assert [note.midi_note for note in notegrid.melody.transpose(grid, -100).notes] == [0, 27]


def test_shift_time () -> None:

	"""Shifting clamps at zero and drops notes pushed past the end."""

	grid = notegrid.melody.parse("C4 . . E4")

	assert _summary(notegrid.melody.shift_time(grid, -0.5)) == [(0.0, 1.0, 60), (2.5, 1.0, 64)]
	assert _summary(notegrid.melody.shift_time(grid, 1.0)) == [(1.0, 1.0, 60)]


def test_melody_stats () -> None:

	"""Stats report the pitch range."""

	stats = notegrid.melody.melody_stats(notegrid.melody.parse("C4 E4 G4 C5"))

	assert stats.count == 4
	assert stats.lowest_name == "C4"
	assert stats.highest_name == "C5"
	assert stats.range == 12
	assert notegrid.melody.melody_stats(notegrid.melody.parse("")).count == 0
