"""Game constants for trick matches."""

# Card range
MIN_CARD_VALUE = 1
MAX_CARD_VALUE = 13

# Match shape
PLAYERS_PER_ROUND = 4
ROUNDS_TO_WIN = 2

# Redis relay
REDIS_PUBLISH_TIMEOUT = 5
REDIS_RECONNECT_DELAY = 5

# Repository
ACTIVE_MATCHES_LIMIT = 100
