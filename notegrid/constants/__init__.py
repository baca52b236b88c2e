"""Constants for notegrid.

This package contains the shared defaults used by the notation codecs:

- ``notegrid.constants`` - grid defaults, tolerances and pitch bounds
- ``notegrid.constants.velocity`` - notation velocity levels and MIDI velocity mapping

All beat values are in **beats**, where 1.0 = one quarter note.
"""

# Grid defaults
DEFAULT_STEPS_PER_BAR = 16
DEFAULT_BEATS_PER_BAR = 4
DEFAULT_MELODY_STEPS_PER_BAR = 4
DEFAULT_NUM_BARS = 1

# Pitch
DEFAULT_OCTAVE = 4
DEFAULT_ROOT_MIDI = 60		# C4, used when a scale root cannot be parsed
MIN_MIDI_NOTE = 0
MAX_MIDI_NOTE = 127
A4_MIDI = 69
A4_FREQUENCY = 440.0

# Tolerances (in beats)
LANE_EPSILON = 0.001
CHORD_EPSILON = 0.01
POINT_DEDUPE_EPSILON = 0.001

# Automation
DEFAULT_AUTOMATION_VALUE = 0.5
DEFAULT_GRID_SNAP = 0.25		# Sixteenth notes
DEFAULT_BPM = 120.0
