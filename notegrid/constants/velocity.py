"""Velocity constants.

Notation velocities are floats: 0 is a rest, 1.0 a normal hit and values
up to 1.2 are allowed by the step editor. MIDI velocity is the attack
strength (0-127) used when a grid is rendered to a MIDI file.
"""

# Notation
REST = 0.0
HIT = 1.0
MAX_STEP_VELOCITY = 1.2
FULL_HIT_THRESHOLD = 0.95	# At or above this a step is written as "x"
DIGIT_FLOOR = 0.1			# Offset of the 1-9 digit velocity scale

# MIDI
DEFAULT_VELOCITY = 100		# Plain hits
ACCENT_VELOCITY = 127		# Accented hits
MIN_VELOCITY = 1			# Lowest audible note-on velocity
MAX_VELOCITY = 127
