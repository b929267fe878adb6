import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Admin room listing (disabled when empty)
    ADMIN_TOKEN = os.environ.get("ADMIN_TOKEN", "")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Storage (empty path keeps rooms in memory only)
    ROOMS_FILE = os.environ.get("ROOMS_FILE", "rooms.json")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Game
    DISCONNECT_GRACE_SEC = float(os.environ.get("DISCONNECT_GRACE_SEC", "5"))
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))
    MIN_PLAYERS = 3
    MAX_PLAYERS = 15
    ITEMS_PER_PLAYER = 5
    TEMP_SESSION_PREFIX = "temp-"
