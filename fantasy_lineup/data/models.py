"""
Data models for the Fantasy Lineup Engine.
Defines the structure for roster slots, players, scoring rules and lineups.
"""

import math
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple


# Roster designations that never take part in a starting lineup
NON_STARTING_POSITIONS = ("BN", "IR", "IR+", "TAXI", "NA")


def _finite_points(value) -> float:
    """Coerce a points value to a finite, non-negative float."""
    try:
        points = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(points) or math.isinf(points) or points < 0:
        return 0.0
    return points


@dataclass(frozen=True)
class RosterSlot:
    """A single starting slot, named by an exact position or a flex label."""
    label: str


@dataclass(frozen=True)
class Player:
    """A roster member scored for one scoring period."""
    key: Optional[str]
    name: str
    primary_position: str
    eligible_positions: Tuple[str, ...] = ()
    points: float = 0.0
    points_source: str = "none"

    def __post_init__(self):
        eligible = tuple(self.eligible_positions or ())
        if self.primary_position and self.primary_position not in eligible:
            eligible = (self.primary_position,) + eligible
        object.__setattr__(self, "eligible_positions", eligible)
        object.__setattr__(self, "points", _finite_points(self.points))

    @property
    def is_resolved(self) -> bool:
        """Whether a usable point value has been found for this player."""
        return self.points > 0


@dataclass(frozen=True)
class ScoringRule:
    """Points awarded per unit of a statistical category."""
    stat_id: str
    weight: float


@dataclass(frozen=True)
class StarterAssignment:
    """A slot paired with the player chosen for it, or None when unfilled."""
    slot: RosterSlot
    player: Optional[Player] = None

    @property
    def is_filled(self) -> bool:
        return self.player is not None


@dataclass
class OptimizationResult:
    """Result of lineup optimization."""
    starters: List[StarterAssignment] = field(default_factory=list)
    bench: List[Player] = field(default_factory=list)
    total: float = 0.0

    def get_starting_players(self) -> List[Player]:
        """Get all players assigned to a starting slot."""
        return [starter.player for starter in self.starters if starter.player is not None]

    def get_unfilled_slots(self) -> List[RosterSlot]:
        """Get slots for which no eligible player remained."""
        return [starter.slot for starter in self.starters if starter.player is None]


@dataclass
class LeagueSettings:
    """Fantasy league roster and scoring settings."""
    league_key: str
    name: str
    season: Optional[int] = None
    current_week: Optional[int] = None
    roster_positions: Dict[str, int] = field(default_factory=dict)
    scoring_settings: Dict[str, float] = field(default_factory=dict)

    def starting_slots(self) -> List[RosterSlot]:
        """Expand each configured position by its count, skipping bench and reserve designations."""
        slots = []
        for position, count in self.roster_positions.items():
            if position in NON_STARTING_POSITIONS:
                continue
            slots.extend(RosterSlot(position) for _ in range(int(count)))
        return slots

    def scoring_rules(self) -> List[ScoringRule]:
        """Get the league stat modifiers as scoring rules."""
        return [ScoringRule(stat_id, weight) for stat_id, weight in self.scoring_settings.items()]
