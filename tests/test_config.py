import logging

import pytest

import notegrid.automation
import notegrid.config


def test_defaults () -> None:

	"""Default settings match the codec defaults."""

	settings = notegrid.config.Settings()

	assert settings.steps_per_bar is None
	assert settings.beats_per_bar == 4
	assert settings.melody_steps_per_bar == 4
	assert settings.grid_snap == 0.25
	assert settings.default_curve == "smooth"
	assert settings.bpm == 120


def test_missing_file_uses_defaults (tmp_path, caplog) -> None:

	"""A missing config file logs a warning and returns defaults."""

	with caplog.at_level(logging.WARNING):
		settings = notegrid.config.load_config(str(tmp_path / "absent.yaml"))

	assert settings == notegrid.config.Settings()
	assert "not found" in caplog.text


def test_load_values (tmp_path) -> None:

	"""Values in the file override the defaults."""

	path = tmp_path / "notegrid.yaml"
	path.write_text("beats_per_bar: 3\nmelody_steps_per_bar: 6\ndefault_curve: linear\nbpm: 96\n")

	settings = notegrid.config.load_config(str(path))

	assert settings.beats_per_bar == 3
	assert settings.melody_steps_per_bar == 6
	assert settings.default_curve == "linear"
	assert settings.bpm == 96
	assert settings.grid_snap == 0.25


def test_empty_file (tmp_path) -> None:

	"""An empty file gives the defaults."""

	path = tmp_path / "notegrid.yaml"
	path.write_text("")

	assert notegrid.config.load_config(str(path)) == notegrid.config.Settings()


def test_unknown_keys_are_ignored (tmp_path, caplog) -> None:

	"""Unknown keys are dropped with a warning."""

	path = tmp_path / "notegrid.yaml"
	path.write_text("bpm: 100\ncolour: blue\n")

	with caplog.at_level(logging.WARNING):
		settings = notegrid.config.load_config(str(path))

	assert settings.bpm == 100
	assert "colour" in caplog.text


def test_invalid_values_raise (tmp_path) -> None:

	"""Out-of-range values and non-mapping files raise ValueError."""

	path = tmp_path / "notegrid.yaml"

	for content in ["bpm: 0\n", "steps_per_bar: -4\n", "default_curve: wobble\n", "grid_snap: -1\n", "- just\n- a list\n"]:
		path.write_text(content)
		with pytest.raises(ValueError):
			notegrid.config.load_config(str(path))


def test_codec_configs () -> None:

	"""Settings build the rhythm, melody and automation configs."""

	settings = notegrid.config.Settings(steps_per_bar=8, beats_per_bar=3, grid_snap=0.5, default_curve="step")

	pattern_config = settings.pattern_config(num_bars=2)
	melody_config = settings.melody_config(scale="dorian", root="D3")
	automation_config = settings.automation_config()

	assert (pattern_config.steps_per_bar, pattern_config.num_bars, pattern_config.beats_per_bar) == (8, 2, 3)
	assert (melody_config.beats_per_bar, melody_config.scale, melody_config.root) == (3, "dorian", "D3")
	assert automation_config.grid_snap == 0.5
	assert automation_config.default_curve_type is notegrid.automation.CurveType.STEP
