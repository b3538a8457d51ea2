"""
Lineup optimization engine for the Fantasy Lineup Engine.
Assigns scored players to roster slots under positional eligibility rules.
"""

import logging
from typing import List, Dict, FrozenSet, Optional, Sequence, Tuple, Union

from ..data.models import Player, RosterSlot, StarterAssignment, OptimizationResult


logger = logging.getLogger(__name__)


# Flex slot label -> primary positions allowed to fill it
FLEX_CATEGORIES: Dict[str, FrozenSet[str]] = {
    "W/R/T": frozenset({"WR", "RB", "TE"}),
    "W/T": frozenset({"WR", "TE"}),
    "R/W": frozenset({"RB", "WR"}),
    "Q/W/R/T": frozenset({"QB", "WR", "RB", "TE"}),
}

# Display order for starters; labels not listed sort after these
CANONICAL_SLOT_ORDER: Tuple[str, ...] = (
    "QB", "RB", "WR", "TE",
    "W/R/T", "W/T", "R/W", "Q/W/R/T",
    "K", "DEF",
)

SlotLike = Union[RosterSlot, str]


def is_flex_slot(label: str) -> bool:
    return label in FLEX_CATEGORIES


def _eligible_positions(player: Player) -> Tuple[str, ...]:
    eligible = getattr(player, "eligible_positions", None)
    return tuple(eligible) if eligible else (player.primary_position,)


def _points(player: Player) -> float:
    return getattr(player, "points", None) or 0.0


def can_fill_fixed_slot(player: Player, label: str) -> bool:
    """Exact-position slot: primary position or any eligible position must match."""
    return player.primary_position == label or label in _eligible_positions(player)


def can_fill_flex_slot(player: Player, label: str) -> bool:
    """Flex slot: primary position or any eligible position must be in the allowed set."""
    allowed = FLEX_CATEGORIES[label]
    if player.primary_position in allowed:
        return True
    return any(position in allowed for position in _eligible_positions(player))


def _slot_rank(starter: StarterAssignment) -> int:
    label = starter.slot.label
    if label in CANONICAL_SLOT_ORDER:
        return CANONICAL_SLOT_ORDER.index(label)
    return len(CANONICAL_SLOT_ORDER)


class LineupOptimizer:
    """Greedy starter assignment over fixed slots first, then flex slots.

    The greedy pass is not a global optimum: a fixed slot always takes the best
    exact-position player even when a flex slot would have used that player
    better. Swapping in max-weight bipartite matching (e.g. the Hungarian
    algorithm over slot/player eligibility) would give the true optimum.
    """

    def optimize_lineup(self, slots: Sequence[SlotLike], players: Sequence[Player]) -> OptimizationResult:
        """Assign the highest-scoring eligible player to each slot without reuse."""
        roster_slots = [slot if isinstance(slot, RosterSlot) else RosterSlot(str(slot)) for slot in slots]

        fixed_slots = [(index, slot) for index, slot in enumerate(roster_slots) if not is_flex_slot(slot.label)]
        flex_slots = [(index, slot) for index, slot in enumerate(roster_slots) if is_flex_slot(slot.label)]

        # sorted() is stable, so equal scores keep their input order
        pool = sorted(players, key=_points, reverse=True)

        assignments: List[Optional[StarterAssignment]] = [None] * len(roster_slots)

        for index, slot in fixed_slots:
            player = self._take_first(pool, lambda p: can_fill_fixed_slot(p, slot.label))
            assignments[index] = StarterAssignment(slot=slot, player=player)

        for index, slot in flex_slots:
            player = self._take_first(pool, lambda p: can_fill_flex_slot(p, slot.label))
            assignments[index] = StarterAssignment(slot=slot, player=player)

        starters = self._sort_for_display([a for a in assignments if a is not None])
        total = self._calculate_total_points(starters)

        unfilled = [starter.slot.label for starter in starters if starter.player is None]
        if unfilled:
            logger.debug(f"No eligible player for slots: {', '.join(unfilled)}")

        return OptimizationResult(starters=starters, bench=pool, total=total)

    def _take_first(self, pool: List[Player], matches) -> Optional[Player]:
        """Remove and return the first player in the pool that matches."""
        for position, player in enumerate(pool):
            if matches(player):
                return pool.pop(position)
        return None

    def _sort_for_display(self, starters: List[StarterAssignment]) -> List[StarterAssignment]:
        return sorted(starters, key=_slot_rank)

    def _calculate_total_points(self, starters: List[StarterAssignment]) -> float:
        total = 0.0
        for starter in starters:
            if starter.player is not None:
                total += _points(starter.player)
        return total


def optimize(slots: Sequence[SlotLike], players: Sequence[Player]) -> OptimizationResult:
    """Optimize a lineup with the default greedy optimizer."""
    return LineupOptimizer().optimize_lineup(slots, players)
