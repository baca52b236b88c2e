"""Keep notation strings in source code and edited grids in step.

A script sets a pattern with ``.step("x..x")`` or a melody with
``.notes("C4 - E4 -")``. A :class:`NotationBinding` ties one such call site
to the grid an editor works on. It parses the notation when the source is
loaded, and after local edits it produces a :class:`SourceEdit` that writes
the regenerated notation back.

While the grid carries local edits that have not been written back, changes
to the source are ignored so that a reload cannot overwrite them.
"""

import abc
import dataclasses
import logging
import re
import typing

import notegrid.constants
import notegrid.melody
import notegrid.rhythm


logger = logging.getLogger(__name__)


GridT = typing.TypeVar("GridT")


@dataclasses.dataclass(frozen=True)
class SourceEdit:

	"""Replace ``source[start:end]`` with ``replacement``."""

	start: int
	end: int
	replacement: str

	def apply (self, source: str) -> str:

		"""Return ``source`` with the edit applied."""

		return source[:self.start] + self.replacement + source[self.end:]


@dataclasses.dataclass(frozen=True)
class NotationSpan:

	"""
	A notation call found in source code.

	``start``/``end`` cover the whole call from the leading dot to the closing
	parenthesis, ``line`` is 1-based.
	"""

	method: str
	start: int
	end: int
	notation: str
	line: int


@dataclasses.dataclass(frozen=True)
class TransportSnapshot:

	"""Playback position reported by the engine."""

	beat: float = 0.0
	running: bool = False


def _call_pattern (method: str) -> typing.Pattern[str]:

	return re.compile(rf"\.{re.escape(method)}\s*\(\s*\"([^\"]*)\"\s*\)")


def _line_bounds (source: str, line: int) -> typing.Optional[typing.Tuple[int, int]]:

	"""Character offsets of a 1-based line, or ``None`` when it does not exist."""

	if line < 1:
		return None

	start = 0

	for _ in range(line - 1):

		newline = source.find("\n", start)

		if newline == -1:
			return None

		start = newline + 1

	end = source.find("\n", start)

	return start, (len(source) if end == -1 else end)


def find_notation_call (source: str, method: str, line: typing.Optional[int] = None) -> typing.Optional[NotationSpan]:

	"""
	Locate the first ``.<method>("...")`` call in ``source``.

	Parameters:
		source: Script text.
		method: Call name, e.g. ``"step"`` or ``"notes"``.
		line: Optional 1-based line to restrict the search to.

	Returns:
		The call span, or ``None`` when there is no matching call.

	Example:
		```python
		span = find_notation_call('kick.step("x...")', "step")
		span.notation  # 'x...'
		```
	"""

	pattern = _call_pattern(method)

	if line is None:
		match = pattern.search(source)
	else:
		bounds = _line_bounds(source, line)
		match = pattern.search(source, bounds[0], bounds[1]) if bounds else None

	if match is None:
		return None

	return NotationSpan(
		method = method,
		start = match.start(),
		end = match.end(),
		notation = match.group(1),
		line = source.count("\n", 0, match.start()) + 1,
	)


class NotationBinding (abc.ABC, typing.Generic[GridT]):

	"""
	Ties one notation call in a script to the grid edited for it.

	Subclasses name the call (:attr:`method`) and convert between notation
	and grid.
	"""

	method: str = ""

	def __init__ (self, line: typing.Optional[int] = None) -> None:

		"""
		Parameters:
			line: 1-based line of the call site, or ``None`` for the first call in the source.
		"""

		self.line = line
		self.grid: typing.Optional[GridT] = None
		self.locally_modified = False

	@abc.abstractmethod
	def parse_notation (self, notation: str) -> GridT:

		"""Convert notation text to a grid."""

		...

	@abc.abstractmethod
	def generate_notation (self, grid: GridT) -> str:

		"""Convert a grid back to notation text."""

		...

	def load (self, source: str) -> typing.Optional[GridT]:

		"""
		Parse the bound call in ``source`` into :attr:`grid`, discarding local edits.

		Returns the grid, or ``None`` (leaving the current grid) when the call is missing.
		"""

		span = find_notation_call(source, self.method, self.line)

		if span is None:
			logger.debug(f"No .{self.method}() call found" + (f" on line {self.line}" if self.line else ""))
			return None

		self.grid = self.parse_notation(span.notation)
		self.locally_modified = False

		return self.grid

	def update (self, grid: GridT) -> None:

		"""Replace the grid with an edited one and mark it as modified."""

		self.grid = grid
		self.mark_modified()

	def mark_modified (self) -> None:

		"""Flag the grid as holding edits not yet written to the source."""

		self.locally_modified = True

	def on_external_change (self, source: str) -> bool:

		"""
		React to the script changing outside the editor.

		Re-parses the call unless the grid holds unwritten local edits.
		Returns whether the grid was reloaded.
		"""

		if self.locally_modified:
			logger.debug(f"Ignoring external change to .{self.method}() while local edits are pending")
			return False

		return self.load(source) is not None

	def build_edit (self, source: str) -> typing.Optional[SourceEdit]:

		"""
		Edit that writes the current grid back to the call in ``source``.

		Clears the modified flag. Returns ``None`` when there is no grid or the
		call can no longer be found.
		"""

		if self.grid is None:
			return None

		span = find_notation_call(source, self.method, self.line)

		if span is None:
			logger.info(f"Cannot write back .{self.method}(): call not found")
			return None

		notation = self.generate_notation(self.grid)
		self.locally_modified = False

		return SourceEdit(span.start, span.end, f'.{self.method}("{notation}")')


class PatternBinding (NotationBinding[notegrid.rhythm.PatternGrid]):

	"""Binding for ``.step("...")`` rhythm patterns."""

	method = "step"

	def __init__ (self, line: typing.Optional[int] = None, config: typing.Optional[notegrid.rhythm.PatternConfig] = None) -> None:

		super().__init__(line)
		self.config = config

	def parse_notation (self, notation: str) -> notegrid.rhythm.PatternGrid:

		return notegrid.rhythm.parse(notation, self.config)

	def generate_notation (self, grid: notegrid.rhythm.PatternGrid) -> str:

		return notegrid.rhythm.generate(grid)


class MelodyBinding (NotationBinding[notegrid.melody.MelodyGrid]):

	"""Binding for ``.notes("...")`` melodies."""

	method = "notes"

	def __init__ (
		self,
		line: typing.Optional[int] = None,
		config: typing.Optional[notegrid.melody.MelodyConfig] = None,
		steps_per_bar: int = notegrid.constants.DEFAULT_MELODY_STEPS_PER_BAR
	) -> None:

		super().__init__(line)
		self.config = config
		self.steps_per_bar = steps_per_bar

	def parse_notation (self, notation: str) -> notegrid.melody.MelodyGrid:

		return notegrid.melody.parse(notation, self.config)

	def generate_notation (self, grid: notegrid.melody.MelodyGrid) -> str:

		return notegrid.melody.generate(grid, self.steps_per_bar)


def playhead_beat (total_beats: float, transport: TransportSnapshot) -> typing.Optional[float]:

	"""
	Position of the playhead inside a looping grid of ``total_beats``.

	Returns ``None`` while the transport is stopped or the grid is empty.
	"""

	if not transport.running or total_beats <= 0:
		return None

	return transport.beat % total_beats


def playhead_step (grid: notegrid.rhythm.PatternGrid, transport: TransportSnapshot) -> typing.Optional[int]:

	"""Index of the step under the playhead, or ``None`` while stopped."""

	beat = playhead_beat(notegrid.rhythm.grid_duration_beats(grid), transport)

	if beat is None:
		return None

	return min(notegrid.rhythm.beat_to_step(grid, beat), grid.total_steps - 1)
