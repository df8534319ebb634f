"""Fixed constants for the transmission feed."""

from typing import Final

# Regeneration gate
GENERATION_INTERVAL_SEC: Final[int] = 3 * 60 * 60  # 3 hours

# Feed size cap (newest first, tail is discarded)
MAX_TRANSMISSIONS: Final[int] = 12

# Periodic driver wake-up
REFRESH_TICK_SEC: Final[int] = 300  # 5 minutes

# Durable store
DEFAULT_TRANSMISSIONS_PATH: Final[str] = "data/recent_transmissions.json"

# Calendar
SECONDS_PER_DAY: Final[int] = 86_400
