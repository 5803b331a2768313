"""
Default values for map functions and Lyapunov fields.
"""

DEFAULT_MAP_NAME = "logistic"
DEFAULT_SEQ = "AB"
DEFAULT_SETTLING = 50
DEFAULT_MEASURING = 100
DEFAULT_X0 = 0.5
DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 600
DEFAULT_B = 2.7

# lower-left, lower-right, upper-left corners of the sampling window
DEFAULT_LOWERLEFT = (2.0, 2.0)
DEFAULT_LOWERRIGHT = (4.0, 2.0)
DEFAULT_UPPERLEFT = (2.0, 4.0)

LOG_FLOOR = 1e-300        # |f'(x1) f'(x2)| at or below this is skipped
MAX_INTERVALS = 32        # color intervals per map
MAX_SEQ_LEN = 256         # A/B symbols per sequence
PROGRESS_ROWS = 128       # rows per block when reporting progress
