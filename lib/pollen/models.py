"""Pollen explorer API response models.

The explorer API encodes most numbers as strings, returns null for empty
lists/strings, and is inconsistent about the reward ``coverage`` field. All
of that is normalized here, at the decoding boundary, so the rest of the
code only sees clean types.
"""

import json
from typing import Annotated, Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _blank_to_zero(v: Any) -> Any:
    if v is None or v == "":
        return 0
    return v


def _none_to_empty_str(v: Any) -> Any:
    return "" if v is None else v


def _none_to_empty_list(v: Any) -> Any:
    return [] if v is None else v


def normalize_coverage(v: Any) -> List[str]:
    """
    Coerce a reward's ``coverage`` to a list of strings.

    Upstream usually sends a JSON array of hex IDs, but some records carry a
    literal string like ``"[]"`` instead (or null). Anything that is not a
    list of strings becomes an empty list.
    """
    if isinstance(v, list) and all(isinstance(x, str) for x in v):
        return v
    if v is not None:
        logger.debug(f"Non-list coverage from upstream, using []: {v!r}")
    return []


StrInt = Annotated[int, BeforeValidator(_blank_to_zero)]
StrFloat = Annotated[float, BeforeValidator(_blank_to_zero)]
NullableStr = Annotated[str, BeforeValidator(_none_to_empty_str)]
StrList = Annotated[List[str], BeforeValidator(_none_to_empty_list)]
Coverage = Annotated[List[str], BeforeValidator(normalize_coverage)]


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Hexes
# =============================================================================

class HexListItem(ApiModel):
    """One cell of the map grid (hexes?h3_hex_top=...)."""

    id: str = Field(alias="h3_hex")
    covered: StrInt = 0
    flower_count: StrInt = 0


class HexDetailFields(ApiModel):
    signal_strength: StrInt = Field(default=0, alias="signalStrength")
    attach: StrInt = 0
    last_covered: NullableStr = ""
    last_pollen_drop: NullableStr = ""
    device: StrList = Field(default_factory=list)
    time: NullableStr = ""
    h3_hex_top: NullableStr = ""
    flowers: StrList = Field(default_factory=list)
    flowers_contained: StrList = Field(default_factory=list)
    bounty_reward: StrFloat = Field(default=0.0, alias="bountyReward")
    h3_hex: NullableStr = ""
    ping: StrFloat = 0.0
    loot_box_reward: StrInt = Field(default=0, alias="lootBoxReward")
    daily_reward: StrInt = Field(default=0, alias="dailyReward")
    bounty: NullableStr = ""
    bounty_time: NullableStr = ""


class HexDetail(ApiModel):
    """Per-hex detail (hex?h3_hex=...)."""

    hex: HexDetailFields


# =============================================================================
# Flowers
# =============================================================================

class FlowerListItem(ApiModel):
    """One device from the flowers listing."""

    id: str = Field(alias="flowerID")
    bounty_rewards: StrInt = 0
    display_name: NullableStr = Field(default="", alias="displayname")
    update_time: NullableStr = ""
    daily_bees_seen: StrList = Field(default_factory=list)
    first_seen: Optional[str] = None
    h_bees_seen: StrList = Field(default_factory=list, alias="hbees_seen")
    wallet_address: NullableStr = ""
    covered_hexes: StrList = Field(default_factory=list)
    last_seen: Optional[str] = None
    daily_attaches: StrInt = 0
    h3_hex: NullableStr = ""
    active: StrInt = Field(default=0, alias="attach")
    flower_rewards: StrFloat = 0.0
    daily_covered_hexes: StrList = Field(default_factory=list)
    nft_address: NullableStr = ""
    nickname: NullableStr = ""
    flower_attaches: StrInt = 0
    daily_h_bees_seen: StrList = Field(default_factory=list, alias="daily_hbees_seen")
    daily_rewards: StrFloat = 0.0
    image_url: NullableStr = ""
    bees_seen: Optional[Dict[str, Any]] = None

    def bees_seen_blob(self) -> str:
        """Serialize bees_seen for storage (compact JSON, sorted keys)."""
        return json.dumps(self.bees_seen, sort_keys=True, separators=(",", ":"))


# =============================================================================
# Rewards
# =============================================================================

class RewardItem(ApiModel):
    """One reward ledger entry (device-rewards-all?device=...)."""

    reward_id: str = Field(alias="rewardID")
    pcn: StrFloat = Field(default=0.0, alias="PCN")
    pic: StrFloat = Field(default=0.0, alias="PIC")
    rse_ratio: StrFloat = Field(default=0.0, alias="RSEratio")
    client: NullableStr = ""
    coverage: Coverage = Field(default_factory=list)
    daily_pic: StrFloat = Field(default=0.0, alias="dailyPIC")
    date: NullableStr = ""
    device: NullableStr = ""
    device_type: NullableStr = ""
    reward: NullableStr = ""
    transaction: NullableStr = ""
    transaction_status: NullableStr = Field(default="", alias="tx_status")
    wallet: NullableStr = ""


# Rewards are grouped by date upstream
DeviceRewards = Dict[str, Optional[List[RewardItem]]]
