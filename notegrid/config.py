"""Project settings, optionally loaded from a YAML file.

A settings file is a flat mapping of the :class:`Settings` fields::

	beats_per_bar: 4
	melody_steps_per_bar: 8
	grid_snap: 0.5
	default_curve: linear
	bpm: 96

Missing keys keep their defaults.
"""

import dataclasses
import logging
import os
import typing

import yaml

import notegrid.automation
import notegrid.constants
import notegrid.melody
import notegrid.rhythm


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "notegrid.yaml"


@dataclasses.dataclass
class Settings:

	"""
	Defaults shared by the codecs, the automation editor and MIDI export.
	"""

	steps_per_bar: typing.Optional[int] = None
	beats_per_bar: float = notegrid.constants.DEFAULT_BEATS_PER_BAR
	melody_steps_per_bar: int = notegrid.constants.DEFAULT_MELODY_STEPS_PER_BAR
	grid_snap: float = notegrid.constants.DEFAULT_GRID_SNAP
	value_snap: float = 0.0
	default_curve: str = notegrid.automation.CurveType.SMOOTH.value
	bpm: float = notegrid.constants.DEFAULT_BPM

	def __post_init__ (self) -> None:

		self.validate()

	def validate (self) -> None:

		"""Raise ``ValueError`` when a setting is out of range."""

		if self.steps_per_bar is not None and (not isinstance(self.steps_per_bar, int) or self.steps_per_bar <= 0):
			raise ValueError(f"steps_per_bar must be a positive integer or null, got {self.steps_per_bar!r}")

		if not isinstance(self.melody_steps_per_bar, int) or self.melody_steps_per_bar <= 0:
			raise ValueError(f"melody_steps_per_bar must be a positive integer, got {self.melody_steps_per_bar!r}")

		for name in ("beats_per_bar", "bpm"):
			value = getattr(self, name)
			if not isinstance(value, (int, float)) or value <= 0:
				raise ValueError(f"{name} must be a positive number, got {value!r}")

		for name in ("grid_snap", "value_snap"):
			value = getattr(self, name)
			if not isinstance(value, (int, float)) or value < 0:
				raise ValueError(f"{name} must be zero or a positive number, got {value!r}")

		valid_curves = [curve.value for curve in notegrid.automation.CurveType]

		if self.default_curve not in valid_curves:
			raise ValueError(f"default_curve must be one of {valid_curves}, got {self.default_curve!r}")

	def pattern_config (self, num_bars: int = notegrid.constants.DEFAULT_NUM_BARS) -> notegrid.rhythm.PatternConfig:

		"""Rhythm codec settings."""

		return notegrid.rhythm.PatternConfig(
			steps_per_bar = self.steps_per_bar,
			num_bars = num_bars,
			beats_per_bar = self.beats_per_bar,
		)

	def melody_config (
		self,
		num_bars: int = notegrid.constants.DEFAULT_NUM_BARS,
		scale: typing.Optional[str] = None,
		root: typing.Optional[str] = None
	) -> notegrid.melody.MelodyConfig:

		"""Melody codec settings, with optional scale context."""

		return notegrid.melody.MelodyConfig(
			num_bars = num_bars,
			beats_per_bar = self.beats_per_bar,
			scale = scale,
			root = root,
		)

	def automation_config (self) -> notegrid.automation.AutomationConfig:

		"""Automation editor settings."""

		return notegrid.automation.AutomationConfig(
			grid_snap = self.grid_snap,
			value_snap = self.value_snap,
			default_curve_type = notegrid.automation.CurveType(self.default_curve),
		)


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> Settings:

	"""
	Load settings from a YAML file.

	A missing or empty file gives the defaults. Unknown keys are ignored with
	a warning.

	Raises:
		ValueError: If the file is not a mapping or a value is invalid.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return Settings()

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f)

	if data is None:
		return Settings()

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")

	known = {field.name for field in dataclasses.fields(Settings)}

	for key in sorted(set(data) - known):
		logger.warning(f"Ignoring unknown config key {key!r} in {config_path}")

	return Settings(**{key: value for key, value in data.items() if key in known})
