"""
notegrid - two-way translation between compact music notation and editable timeline data.

Live-coded music scripts describe their material in short strings: step
patterns for drums, note sequences for melodies, ``fade()`` calls for
parameter automation. Editors want structured data instead: a grid of steps,
a piano roll, a set of control points. notegrid converts in both directions
and hands back the edit that writes a changed grid into the script.

What it covers:

- **Rhythm.** ``"x..x..X.|x.x.x.x."`` parses into a :class:`PatternGrid` of
  velocity/accent steps. Toggle, accent, resize, shift, invert and
  Euclidean fills are pure transforms; ``generate()`` writes the string back.
- **Melody.** ``"C4 - E4:m . | 1 3 5 -"`` parses into beat-positioned notes,
  with chord suffixes, scale degrees, ties and rests. Polyphonic grids are
  split into monophonic lanes for writing back, and chords are named again
  on the way out.
- **Pitch.** Note names, frequencies, scales (with ``register_scale()`` for
  your own) and chord tables.
- **Automation.** Control points with linear, exponential, smooth, step and
  Bezier segments; evaluation at any beat; conversion to and from
  ``group("drums").fade("amp", 0.0, 1.0, 4.0);`` source snippets; SVG path
  data for drawing.
- **Sync.** Locate ``.step("...")`` and ``.notes("...")`` call sites, keep
  local edits safe from reloads, and produce the source edit that writes a
  grid back.
- **MIDI export.** Render grids and automation lanes with ``mido``.

Minimal example:

    ```python
    import notegrid.rhythm

    grid = notegrid.rhythm.parse("x...x...x...x...")
    grid = notegrid.rhythm.shift_pattern(grid, 2)
    notegrid.rhythm.generate(grid)  # "..x...x...x...x."
    ```

Package-level exports: ``PatternGrid``, ``MelodyGrid``, ``AutomationLane``,
``Settings``, ``load_config``, ``register_scale``.
"""

import notegrid.automation
import notegrid.config
import notegrid.intervals
import notegrid.melody
import notegrid.rhythm


PatternGrid = notegrid.rhythm.PatternGrid
MelodyGrid = notegrid.melody.MelodyGrid
AutomationLane = notegrid.automation.AutomationLane
Settings = notegrid.config.Settings
load_config = notegrid.config.load_config
register_scale = notegrid.intervals.register_scale
