"""Constants used throughout the auction engine"""

# Team colors offered when a team is created
TEAM_COLORS = [
    "#FF5733",  # Red
    "#3357FF",  # Blue
    "#33FF57",  # Green
    "#FF33F5",  # Magenta
    "#FFD700",  # Gold
    "#FF8C00",  # Dark Orange
    "#8A2BE2",  # Blue Violet
    "#00CED1",  # Dark Turquoise
    "#FF1493",  # Deep Pink
    "#32CD32",  # Lime Green
    "#FF4500",  # Orange Red
    "#9370DB",  # Medium Purple
]

# Referral codes
REFERRAL_CODE_LENGTH = 8
REFERRAL_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
REFERRAL_CODE_MAX_ATTEMPTS = 5
REFERRAL_VALID_DAYS = 2

# Subscription gate
FREE_TEAM_LIMIT = 3

# Store root
AUCTIONS_PATH = "auctions"

# Store retries
MAX_RETRIES = 3
RETRY_DELAY = 0.5  # seconds, doubled on every attempt
REQUEST_TIMEOUT = 10  # seconds

DAY_MS = 24 * 60 * 60 * 1000
