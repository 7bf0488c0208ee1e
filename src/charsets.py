"""Character ramp for ASCII art conversion."""

# Sparse to dense; index grows with visual density.
ASCII_RAMP = " .:-=+*#%@"

RAMP_LAST_INDEX = len(ASCII_RAMP) - 1
