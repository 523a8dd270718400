"""Pollen Mobile explorer API client."""

from lib.pollen.api_client import PollenApiClient
from lib.pollen.config import PollenApiConfig, get_api_key
from lib.pollen.models import (
    DeviceRewards,
    FlowerListItem,
    HexDetail,
    HexListItem,
    RewardItem,
    normalize_coverage,
)

__all__ = [
    "PollenApiClient",
    "PollenApiConfig",
    "get_api_key",
    "DeviceRewards",
    "FlowerListItem",
    "HexDetail",
    "HexListItem",
    "RewardItem",
    "normalize_coverage",
]
