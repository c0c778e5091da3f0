"""
Building spaces: rooms, hallways and doors.
"""

from .schemas import SpaceCreate, SpaceEdit, parse_space
from .service import UnifiedSpaceService, coerce_enums
from .templates import SPACE_TEMPLATES, QuickSpaceCreator, smart_defaults

__all__ = [
    "QuickSpaceCreator",
    "SPACE_TEMPLATES",
    "SpaceCreate",
    "SpaceEdit",
    "UnifiedSpaceService",
    "coerce_enums",
    "parse_space",
    "smart_defaults",
]
