"""
Configuration

Settings come from environment variables. When ``AUCTION_SECRET_NAME`` is
set, the Firebase credentials stored in AWS Secrets Manager take precedence
over the environment.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import boto3
from botocore.exceptions import ClientError

from ..utils.constants import (
    FREE_TEAM_LIMIT,
    MAX_RETRIES,
    REFERRAL_VALID_DAYS,
    REQUEST_TIMEOUT,
    RETRY_DELAY,
)

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "firebase")

# Secret keys that may override settings
_SECRET_FIELDS = {
    "FIREBASE_DATABASE_URL": "firebase_database_url",
    "FIREBASE_AUTH_TOKEN": "firebase_auth_token",
}


class SecretsManager:
    def __init__(self, secret_name: str, region_name: str = "ap-northeast-2", client=None):
        self.secret_name = secret_name
        self.region_name = region_name
        if client is None:
            session = boto3.session.Session()
            client = session.client(service_name="secretsmanager", region_name=region_name)
        self.client = client

    def get_secrets(self) -> Dict[str, str]:
        """Get secrets from AWS Secrets Manager"""
        try:
            response = self.client.get_secret_value(SecretId=self.secret_name)
        except ClientError as e:
            logger.error(f"Error getting secret {self.secret_name}: {e}")
            raise
        if "SecretString" in response:
            return json.loads(response["SecretString"])
        raise ValueError("Secret not found in expected format")


@dataclass
class AuctionSettings:
    store_backend: str = "memory"
    firebase_database_url: Optional[str] = None
    firebase_auth_token: Optional[str] = None
    blob_bucket: Optional[str] = None
    aws_region: str = "ap-northeast-2"
    secret_name: Optional[str] = None
    store_timeout: float = REQUEST_TIMEOUT
    store_max_retries: int = MAX_RETRIES
    store_retry_delay: float = RETRY_DELAY
    free_team_limit: int = FREE_TEAM_LIMIT
    referral_valid_days: int = REFERRAL_VALID_DAYS
    owner_id: str = "local-owner"
    owner_name: str = "Auction Host"
    owner_subscribed: bool = False

    def __post_init__(self):
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store backend {self.store_backend!r}; expected one of {', '.join(STORE_BACKENDS)}"
            )
        if self.store_backend == "firebase" and not self.firebase_database_url:
            raise ValueError("FIREBASE_DATABASE_URL is required for the firebase backend")
        if self.free_team_limit < 0:
            raise ValueError("Free team limit cannot be negative")
        if self.store_retry_delay < 0:
            raise ValueError("Store retry delay cannot be negative")


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    secrets: Optional[SecretsManager] = None
) -> AuctionSettings:
    """Build settings from the environment and, if configured, Secrets Manager"""
    env = os.environ if environ is None else environ

    values = {
        "store_backend": env.get("AUCTION_STORE_BACKEND", "memory").strip().lower(),
        "firebase_database_url": env.get("FIREBASE_DATABASE_URL") or None,
        "firebase_auth_token": env.get("FIREBASE_AUTH_TOKEN") or None,
        "blob_bucket": env.get("AUCTION_BLOB_BUCKET") or None,
        "aws_region": env.get("AWS_REGION", "ap-northeast-2"),
        "secret_name": env.get("AUCTION_SECRET_NAME") or None,
        "store_timeout": float(env.get("AUCTION_STORE_TIMEOUT", REQUEST_TIMEOUT)),
        "store_max_retries": int(env.get("AUCTION_STORE_MAX_RETRIES", MAX_RETRIES)),
        "store_retry_delay": float(env.get("AUCTION_STORE_RETRY_DELAY", RETRY_DELAY)),
        "free_team_limit": int(env.get("AUCTION_FREE_TEAM_LIMIT", FREE_TEAM_LIMIT)),
        "referral_valid_days": int(env.get("AUCTION_REFERRAL_VALID_DAYS", REFERRAL_VALID_DAYS)),
        "owner_id": env.get("AUCTION_OWNER_ID", "local-owner"),
        "owner_name": env.get("AUCTION_OWNER_NAME", "Auction Host"),
        "owner_subscribed": _flag(env.get("AUCTION_OWNER_SUBSCRIBED")),
    }

    if values["secret_name"]:
        manager = secrets or SecretsManager(values["secret_name"], values["aws_region"])
        stored = manager.get_secrets()
        for key, field_name in _SECRET_FIELDS.items():
            if stored.get(key):
                values[field_name] = stored[key]
        logger.info(f"Loaded store credentials from secret {values['secret_name']}")

    return AuctionSettings(**values)
