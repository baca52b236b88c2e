import random

import notegrid.melody


def _key (note: notegrid.melody.MelodyNote) -> tuple:

	return (note.start_beat, note.duration, note.midi_note)


def test_chord_splits_into_one_lane_per_tone () -> None:

	"""Notes starting together with equal length land in separate lanes."""

	grid = notegrid.melody.parse("C4:maj - . .")
	lanes = notegrid.melody.split_into_lanes(grid.notes)

	assert [[note.midi_note for note in lane] for lane in lanes] == [[60], [64], [67]]


def test_first_fit_reuses_free_lanes () -> None:

	"""A note goes into the first lane that has finished."""

	notes = [
		notegrid.melody.MelodyNote(0.0, 2.0, 60),
		notegrid.melody.MelodyNote(1.0, 2.0, 62),
		notegrid.melody.MelodyNote(2.0, 1.0, 64),
	]

	lanes = notegrid.melody.split_into_lanes(notes)

	assert [[note.midi_note for note in lane] for lane in lanes] == [[60, 64], [62]]
	assert notegrid.melody.count_lanes(notes) == 2


def test_touching_within_tolerance_shares_a_lane () -> None:

	"""A note starting a hair before the previous one ends still fits."""

	notes = [
		notegrid.melody.MelodyNote(0.0, 1.0, 60),
		notegrid.melody.MelodyNote(0.9995, 1.0, 62),
	]

	assert notegrid.melody.count_lanes(notes) == 1


def test_empty_input_has_one_lane () -> None:

	"""There is always at least one lane."""

	assert notegrid.melody.split_into_lanes([]) == [[]]


def test_lanes_never_overlap_and_keep_every_note () -> None:

	"""Within each lane no two notes sound together, and all lanes together hold every note."""

	rng = random.Random(11)

	for _ in range(50):

		notes = [
			notegrid.melody.MelodyNote(
				rng.randrange(0, 32) * 0.25,
				rng.choice([0.25, 0.5, 1.0, 2.0]),
				rng.randint(40, 90),
			)
			for _ in range(rng.randint(0, 24))
		]

		lanes = notegrid.melody.split_into_lanes(notes)

		for lane in lanes:
			for i, a in enumerate(lane):
				for b in lane[i + 1:]:
					assert not a.overlaps(b)

		merged = sorted(_key(note) for lane in lanes for note in lane)

		assert merged == sorted(_key(note) for note in notes)


def test_multi_lane_round_trip () -> None:

	"""A polyphonic grid written as lanes parses back to the same notes."""

	grid = notegrid.melody.parse("C4:maj - E4 - | G4 - - -")
	grid = notegrid.melody.add_note(grid, notegrid.melody.MelodyNote(5.0, 2.0, 72))

	lanes = notegrid.melody.generate_multi_lane(grid)
	merged = notegrid.melody.parse_multi_lane(lanes)

	assert len(lanes) == 3
	assert merged.num_bars == 2
	assert sorted(_key(note) for note in merged.notes) == sorted(_key(note) for note in grid.notes)


def test_parse_multi_lane_takes_longest_lane () -> None:

	"""The merged grid is as long as the longest lane."""

	merged = notegrid.melody.parse_multi_lane(["C4 - - -", "E4 - - - | G4 - - -"])

	assert merged.num_bars == 2
	assert len(merged.notes) == 3


def test_parse_multi_lane_empty () -> None:

	"""No lanes gives an empty grid of the configured length."""

	merged = notegrid.melody.parse_multi_lane([], notegrid.melody.MelodyConfig(num_bars=3))

	assert merged.notes == []
	assert merged.num_bars == 3
