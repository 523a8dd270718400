from pydantic import BaseModel, ConfigDict, field_validator


class PlaceInfo(BaseModel):
    """Reverse-geocoded place attached to hexes and flowers."""

    lat: float = 0.0
    lng: float = 0.0
    address: str = ""
    suburb: str = ""
    city: str = ""
    state: str = ""
    town: str = ""
    county: str = ""

    model_config = ConfigDict(from_attributes=True)

    @field_validator("address", "suburb", "city", "state", "town", "county", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        """Handle NULL from database / missing upstream keys."""
        return v if v is not None else ""
