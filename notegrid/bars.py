"""Bar splitting shared by the rhythm and melody codecs.

Notation strings separate bars with ``|``. Leading, trailing and repeated
separators carry no meaning, so they are dropped before either codec sees
the bars. Content inside a bar is left alone; the tokenizers deal with
internal whitespace themselves.
"""

import typing


BAR_SEPARATOR = "|"


def split_into_bars (text: str) -> typing.List[str]:

	"""Split notation into trimmed, non-empty bars.

	Example:
		```python
		split_into_bars("x...|x...")        # ["x...", "x..."]
		split_into_bars("x...|x...|")       # ["x...", "x..."]
		split_into_bars("|x...||x...")      # ["x...", "x..."]
		split_into_bars("C4 - - | E4 - -")  # ["C4 - -", "E4 - -"]
		```
	"""

	return [bar.strip() for bar in text.split(BAR_SEPARATOR) if bar.strip()]


def normalize_bars (text: str) -> str:

	"""Rejoin the bars of *text* with single separators.

	Idempotent: ``normalize_bars(normalize_bars(s)) == normalize_bars(s)``.
	"""

	return BAR_SEPARATOR.join(split_into_bars(text))


def count_bars (text: str) -> int:

	"""Number of bars in *text* after normalization."""

	return len(split_into_bars(text))


# Alias used by the codecs.
parse_bars = split_into_bars
