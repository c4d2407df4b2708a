"""Database model exports."""

from .catalog import BonusPoint, Combination, CombinationPoint
from .earned import EarnedBonusPoint, EarnedCombination
from .member import Member
from .participant import ParticipantRole, Privilege, ROLE_PRIVILEGES, RallyParticipant
from .rally import Rally

__all__ = [
    "BonusPoint",
    "Combination",
    "CombinationPoint",
    "EarnedBonusPoint",
    "EarnedCombination",
    "Member",
    "ParticipantRole",
    "Privilege",
    "ROLE_PRIVILEGES",
    "Rally",
    "RallyParticipant",
]
