from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from db.models.place import PlaceInfo


class Hex(BaseModel):
    """Hex model matching the pollen_hexes table."""

    id: str  # H3 cell, 15 hex chars
    flower_count: int = 0
    covered: int = 0

    # Location
    place: PlaceInfo = Field(default_factory=PlaceInfo)

    # Network
    attach: int = 0
    flowers: List[str] = Field(default_factory=list)
    flowers_contained: List[str] = Field(default_factory=list)
    bounty_reward: float = 0.0
    loot_box_reward: int = 0
    daily_reward: int = 0
    bounty: str = ""
    bounty_time: str = ""

    # Set by the database on every upsert
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(cls, row: dict) -> "Hex":
        return cls(place=PlaceInfo.model_validate(row), **row)

    def to_db_tuple(self) -> tuple:
        """
        Convert to tuple for UPSERT_HEX.
        Order: (id, flower_count, covered, lat, lng, address, suburb, city, state,
                town, county, attach, flowers, flowers_contained, bounty_reward,
                loot_box_reward, daily_reward, bounty, bounty_time)
        """
        p = self.place
        return (
            self.id,
            self.flower_count,
            self.covered,
            p.lat,
            p.lng,
            p.address,
            p.suburb,
            p.city,
            p.state,
            p.town,
            p.county,
            self.attach,
            self.flowers,
            self.flowers_contained,
            self.bounty_reward,
            self.loot_box_reward,
            self.daily_reward,
            self.bounty,
            self.bounty_time,
        )
