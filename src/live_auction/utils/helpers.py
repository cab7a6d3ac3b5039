"""Small pure helpers: ids, referral codes, gates and formatting"""

import secrets
import time
from datetime import datetime, timezone
from typing import Dict, Optional

from .constants import (
    DAY_MS,
    FREE_TEAM_LIMIT,
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    REFERRAL_VALID_DAYS,
)

# Push ids sort by creation time, like the real-time store's own keys
_PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def generate_push_id(timestamp_ms: Optional[int] = None) -> str:
    """Generate a 20-char, time-ordered unique key"""
    ts = now_ms() if timestamp_ms is None else timestamp_ms
    time_chars = []
    for _ in range(8):
        time_chars.append(_PUSH_CHARS[ts % 64])
        ts //= 64
    random_chars = [secrets.choice(_PUSH_CHARS) for _ in range(12)]
    return "".join(reversed(time_chars)) + "".join(random_chars)


def generate_referral_code() -> str:
    """Generate an 8-character [A-Z0-9] code from a cryptographically strong source"""
    return "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH))


def normalize_referral_code(code: str) -> str:
    return (code or "").strip().upper()


def is_referral_code_valid(auction_date: int, now: Optional[int] = None,
                           valid_days: int = REFERRAL_VALID_DAYS) -> bool:
    """Codes stop resolving a couple of days after the auction date"""
    current = now_ms() if now is None else now
    return current <= auction_date + valid_days * DAY_MS


def can_add_team(current_team_count: int, has_subscription: bool,
                 free_limit: int = FREE_TEAM_LIMIT) -> bool:
    if has_subscription:
        return True
    return current_team_count < free_limit


def can_start_auction(players_count: int, teams_count: int, players_per_team: int) -> Dict[str, object]:
    """Check the roster arithmetic needed before going live"""
    if teams_count == 0:
        return {"valid": False, "message": "Add at least one team"}

    if players_count == 0:
        return {"valid": False, "message": "Add at least one player"}

    required_players = teams_count * players_per_team
    if players_count < required_players:
        return {
            "valid": False,
            "message": (
                f"Need {required_players} players "
                f"({players_per_team} per team x {teams_count} teams)"
            ),
        }

    return {"valid": True, "message": None}


def format_credits(amount: int) -> str:
    return f"{amount:,}"


def format_timestamp(timestamp_ms: Optional[int]) -> str:
    if not timestamp_ms:
        return "-"
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime("%b %d, %Y at %H:%M UTC")


def generate_share_message(auction_name: str, referral_code: str) -> str:
    return (
        f'Join my auction "{auction_name}"! Use referral code: {referral_code}\n\n'
        f"Download Auction app to participate."
    )


def generate_deep_link(referral_code: str) -> str:
    return f"auction://auction/{referral_code}"
