"""
Centralized configuration constants for the background transparency engine.

Ground rules:
- one call == one image, no process-wide state
- every heuristic constant lives here (tunable, not load-bearing)
"""

# Per-call option defaults.
DEFAULT_COLOR_TOL = 10.0
DEFAULT_TILE_GUESS = 16
DEFAULT_GRAD_KEEP = 10.0
DEFAULT_FEATHER = 2.0
DEFAULT_MAX_DIMENSION = 512
DEFAULT_MODE = "auto"

# Background sampling / clustering.
MIN_TILE_DIVISOR = 8
SEED_SAMPLE_WEIGHT = 4
MIN_MERGE_DISTANCE = 4.0
MERGE_DISTANCE_SCALE = 0.6
MIN_CLUSTER_SAMPLES = 2
MAX_BACKGROUND_CLUSTERS = 2
SYNTHETIC_DEDUP_DISTANCE = 2.0

# Region growth.
MIN_TOLERANCE = 12.0
MAX_TOLERANCE = 45.0
CLUSTER_SPREAD_SCALE = 0.45
FORCE_TOLERANCE_SCALE = 1.35
EDGE_MATCH_SCALE = 0.4

# Rec. 709 luma weights on 8-bit channels (edge guard only).
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)
