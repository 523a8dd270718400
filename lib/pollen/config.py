"""Pollen explorer API configuration."""

import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

POLLEN_API_BASE_URL = "https://api.pollenmobile.io/explorer"
POLLEN_EXPLORER_ORIGIN = "https://explorer.pollenmobile.io"
POLLEN_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/105.0.0.0 Safari/537.36"
)


def get_api_key() -> str:
    """Get Pollen API key from environment."""
    key = os.getenv("POLLEN_API_KEY", "")
    if not key:
        raise ValueError("POLLEN_API_KEY environment variable not set")
    return key


class PollenApiConfig(BaseModel):
    """Connection, rate-limit and retry settings for the Pollen explorer API."""

    base_url: str = POLLEN_API_BASE_URL
    api_key: str = ""
    rate_interval: float = Field(default=0.5, description="Seconds between requests")
    retries: int = Field(default=3, ge=1, description="Total attempts per request")
    retry_wait: float = Field(default=180.0, description="Seconds slept between attempts")
    timeout: float = Field(default=60.0, description="Per-attempt timeout in seconds")

    @classmethod
    def from_env(cls, api_key: Optional[str] = None) -> "PollenApiConfig":
        return cls(
            base_url=os.getenv("POLLEN_API_BASE_URL", POLLEN_API_BASE_URL),
            api_key=api_key or get_api_key(),
            rate_interval=float(os.getenv("POLLEN_RATE_INTERVAL", "0.5")),
            retries=int(os.getenv("POLLEN_RETRIES", "3")),
            retry_wait=float(os.getenv("POLLEN_RETRY_WAIT", "180")),
            timeout=float(os.getenv("POLLEN_TIMEOUT", "60")),
        )

    def headers(self) -> Dict[str, str]:
        """Fixed header set the explorer API expects from its own web client."""
        return {
            "accept": "application/json",
            "origin": POLLEN_EXPLORER_ORIGIN,
            "referer": f"{POLLEN_EXPLORER_ORIGIN}/",
            "user-agent": POLLEN_USER_AGENT,
            "x-api-key": self.api_key,
        }
