from db.models.place import PlaceInfo
from db.models.hex import Hex
from db.models.flower import Flower
from db.models.reward import Reward

__all__ = [
    "PlaceInfo",
    "Hex",
    "Flower",
    "Reward",
]
