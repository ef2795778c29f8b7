"""Shared constants for recipe tree layout and playback."""

# Element names every search starts from (tier 0).
BASE_ELEMENTS = ("air", "earth", "fire", "water")

# Search modes understood by the backend.
SEARCH_MODES = ("bfs", "dfs", "bidirectional", "multi")
DEFAULT_SEARCH_MODE = "bfs"

# Pixel spacing applied to logical layout units when serializing for the UI.
NODE_X_SPACING = 180.0
NODE_Y_SPACING = 120.0

# Leaf separation (logical units)
FORWARD_SIBLING_UNIT = 1.0
FORWARD_CROSS_BRANCH = 1.0
DEEP_SIBLING_UNIT = 1.0
DEEP_CROSS_BRANCH = 0.5

# Playback
DEFAULT_INTERVAL_MS = 1000
SPEED_PRESETS_MS = (1000, 500, 2000)
MIN_INTERVAL_MS = 50

# Search backend
DEFAULT_BACKEND_URL = "http://localhost:5000"
DEFAULT_BACKEND_TIMEOUT = 60.0
