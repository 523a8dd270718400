from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from db.models.place import PlaceInfo


class Flower(BaseModel):
    """Flower (device node) model matching the pollen_flowers table."""

    id: str

    # Rewards / counters
    bounty_rewards: int = 0
    daily_attaches: int = 0
    flower_attaches: int = 0
    flower_rewards: float = 0.0
    daily_rewards: float = 0.0
    active: int = 0  # upstream "attach"

    # Display
    display_name: str = ""
    nickname: str = ""
    image_url: str = ""

    # Timestamps as reported upstream (opaque strings)
    update_time: str = ""
    first_seen: Optional[str] = None
    last_seen: Optional[str] = None

    # Coverage / sightings
    daily_bees_seen: List[str] = Field(default_factory=list)
    h_bees_seen: List[str] = Field(default_factory=list)
    covered_hexes: List[str] = Field(default_factory=list)
    daily_covered_hexes: List[str] = Field(default_factory=list)
    daily_h_bees_seen: List[str] = Field(default_factory=list)
    bees_seen: str = "null"  # JSON blob

    # Ownership
    wallet_address: str = ""
    nft_address: str = ""

    # Location
    h3_hex: str = ""
    place: PlaceInfo = Field(default_factory=PlaceInfo)

    # Set by the database on every upsert
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(cls, row: dict) -> "Flower":
        return cls(place=PlaceInfo.model_validate(row), **row)

    def to_db_tuple(self) -> tuple:
        """
        Convert to tuple for UPSERT_FLOWER.
        Order matches FLOWER_COLUMNS in db/queries/batch.py.
        """
        p = self.place
        return (
            self.id,
            self.bounty_rewards,
            self.display_name,
            self.update_time,
            self.daily_bees_seen,
            self.first_seen,
            self.h_bees_seen,
            self.wallet_address,
            self.covered_hexes,
            self.last_seen,
            self.daily_attaches,
            self.h3_hex,
            p.lat,
            p.lng,
            p.address,
            p.suburb,
            p.city,
            p.state,
            p.town,
            p.county,
            self.active,
            self.flower_rewards,
            self.daily_covered_hexes,
            self.nft_address,
            self.nickname,
            self.flower_attaches,
            self.daily_h_bees_seen,
            self.daily_rewards,
            self.image_url,
            self.bees_seen,
        )
