"""Configuration for mpnmatch."""

import os

# Server settings
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))
LOG_LEVEL = os.getenv("MPNMATCH_LOG_LEVEL", "INFO").upper()

# Comma-separated handler ids to load (empty = all built-in handlers)
ENABLED_HANDLERS = [
    h.strip().lower()
    for h in os.getenv("MPNMATCH_HANDLERS", "").split(",")
    if h.strip()
]

# Inputs longer than this are not part numbers; they normalize to "" and match nothing
MAX_MPN_LENGTH = int(os.getenv("MAX_MPN_LENGTH", "64"))

# Relative tolerance used when "match" rules compare two decoded numbers
# (absorbs float noise from unit conversion, e.g. 0.1uF vs 100nF)
NUMERIC_MATCH_TOLERANCE = 1e-6
