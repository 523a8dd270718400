"""Geocode Repository - reads place data already persisted on hexes and flowers."""

from typing import Dict

from db.client import queries, get_conn
from db.models.place import PlaceInfo


class GeocodeRepo:
    """Database reads used to warm the geocode cache."""

    async def get_cached_places(self) -> Dict[str, PlaceInfo]:
        """
        Map cell ID -> PlaceInfo from pollen_hexes (by id) and pollen_flowers
        (by h3_hex). Flower rows win when both tables know a cell.
        """
        places: Dict[str, PlaceInfo] = {}
        async with get_conn() as conn:
            for query in (queries.get_hex_places, queries.get_flower_places):
                results = await query(conn)
                for r in results:
                    row = dict(r)
                    places[row.pop("cell_id")] = PlaceInfo.model_validate(row)
        return places
