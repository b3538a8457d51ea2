"""
Score resolution for the Fantasy Lineup Engine.
Turns inconsistently-shaped player records into a single point value with provenance.
"""

import logging
import math
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..data.models import Player, ScoringRule


logger = logging.getLogger(__name__)

# Stat identifiers Yahoo uses for a pre-computed fantasy point total
FANTASY_POINTS_STAT_IDS = ("900", "PTS")

NO_SOURCE = "none"
SCORING_RULES_SOURCE = "scoring_rules"
BATCH_SOURCE_PREFIX = "batch:"

ScoringRules = Union[Mapping[str, float], Iterable[ScoringRule]]
StatsSource = Callable[[List[str]], Iterable[Dict[str, Any]]]


def _to_number(value: Any) -> Optional[float]:
    """Read a number from a scalar or an element dict carrying '#text'."""
    if isinstance(value, dict):
        value = value.get("#text")
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _player_points(record: Dict[str, Any]) -> Dict[str, Any]:
    player_points = record.get("player_points")
    return player_points if isinstance(player_points, dict) else {}


def _stat_entries(record: Dict[str, Any]) -> List[Any]:
    player_stats = record.get("player_stats")
    if not isinstance(player_stats, dict):
        return []
    stats = player_stats.get("stats")
    if not isinstance(stats, dict):
        return []
    return _as_list(stats.get("stat"))


def extract_total_attribute(record: Dict[str, Any]) -> Optional[float]:
    """<player_points total="12.5"> attribute form."""
    return _to_number(_player_points(record).get("@total"))


def extract_total_value(record: Dict[str, Any]) -> Optional[float]:
    """<player_points><total>12.5</total></player_points> nested form."""
    return _to_number(_player_points(record).get("total"))


def extract_flat_points(record: Dict[str, Any]) -> Optional[float]:
    return _to_number(record.get("points"))


def extract_fantasy_points_stat(record: Dict[str, Any]) -> Optional[float]:
    """Scan the raw stat line for the fantasy point total stat."""
    for stat in _stat_entries(record):
        if not isinstance(stat, dict):
            continue
        stat_id = str(stat.get("stat_id", "")).strip()
        if stat_id not in FANTASY_POINTS_STAT_IDS:
            continue
        points = _to_number(stat.get("value"))
        if points is not None and points > 0:
            return points
    return None


# Tried in order; the first usable value wins
POINT_EXTRACTORS: Tuple[Tuple[str, Callable[[Dict[str, Any]], Optional[float]]], ...] = (
    ("total_attribute", extract_total_attribute),
    ("total_value", extract_total_value),
    ("points", extract_flat_points),
    ("fantasy_points_stat", extract_fantasy_points_stat),
)


def resolve_points(record: Any) -> Tuple[float, str]:
    """Resolve a player's point value, returning (points, strategy name)."""
    if not isinstance(record, dict):
        return 0.0, NO_SOURCE

    for source, extractor in POINT_EXTRACTORS:
        points = extractor(record)
        if points is not None and points > 0:
            return points, source

    return 0.0, NO_SOURCE


def _rule_weights(scoring_rules: Optional[ScoringRules]) -> Dict[str, float]:
    if not scoring_rules:
        return {}
    if isinstance(scoring_rules, Mapping):
        items = scoring_rules.items()
    else:
        items = ((rule.stat_id, rule.weight) for rule in scoring_rules)

    weights = {}
    for stat_id, weight in items:
        number = _to_number(weight)
        if number is not None:
            weights[str(stat_id).strip()] = number
    return weights


def compute_from_raw_stats(raw_stat_line: Any, scoring_rules: Optional[ScoringRules]) -> float:
    """Sum value * weight over every stat in the line; unweighted stats count for nothing."""
    if not isinstance(raw_stat_line, dict):
        return 0.0

    weights = _rule_weights(scoring_rules)
    total = 0.0
    for stat in _stat_entries(raw_stat_line):
        if not isinstance(stat, dict):
            continue
        weight = weights.get(str(stat.get("stat_id", "")).strip())
        value = _to_number(stat.get("value"))
        if weight is None or value is None:
            continue
        total += value * weight
    return total


def _text(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("#text")
    return str(value).strip() if value is not None else ""


def _record_name(record: Dict[str, Any]) -> str:
    name = record.get("name")
    if isinstance(name, dict) and "full" in name:
        return _text(name["full"])
    return _text(name)


def _record_eligible_positions(record: Dict[str, Any]) -> Tuple[str, ...]:
    eligible = record.get("eligible_positions")
    if isinstance(eligible, dict):
        eligible = eligible.get("position")
    positions = [_text(position) for position in _as_list(eligible)]
    return tuple(position for position in positions if position)


def score_player(record: Dict[str, Any]) -> Player:
    """Build a scored Player from a raw roster record."""
    points, source = resolve_points(record)
    primary_position = _text(record.get("primary_position")) or _text(record.get("display_position"))
    key = _text(record.get("player_key")) or None

    if source == NO_SOURCE:
        logger.debug(f"No point value found for {key or _record_name(record)}")

    return Player(
        key=key,
        name=_record_name(record),
        primary_position=primary_position,
        eligible_positions=_record_eligible_positions(record),
        points=points,
        points_source=source,
    )


def resolve_batch(players: List[Player], scoring_rules: Optional[ScoringRules] = None,
                  stats_source: Optional[StatsSource] = None) -> List[Player]:
    """Fill in missing point values from a batch stats source, then from league scoring rules."""
    unresolved_keys = []
    for player in players:
        if not player.is_resolved and player.key and player.key not in unresolved_keys:
            unresolved_keys.append(player.key)

    if not unresolved_keys or stats_source is None:
        return list(players)

    try:
        stat_lines = {}
        for line in stats_source(unresolved_keys) or []:
            if isinstance(line, dict) and _text(line.get("player_key")):
                stat_lines[_text(line.get("player_key"))] = line
    except Exception as e:
        logger.error(f"Error fetching batch stats for {len(unresolved_keys)} players: {e}")
        return list(players)

    enriched = []
    batch_count = 0
    computed_count = 0
    for player in players:
        line = stat_lines.get(player.key) if not player.is_resolved and player.key else None
        if line is None:
            enriched.append(player)
            continue

        points, source = resolve_points(line)
        if source != NO_SOURCE:
            enriched.append(replace(player, points=points, points_source=BATCH_SOURCE_PREFIX + source))
            batch_count += 1
            continue

        computed = compute_from_raw_stats(line, scoring_rules)
        if computed > 0:
            enriched.append(replace(player, points=computed, points_source=SCORING_RULES_SOURCE))
            computed_count += 1
        else:
            logger.debug(f"Player {player.name} still has no points after batch enrichment")
            enriched.append(player)

    logger.info(
        f"Batch enrichment: {len(unresolved_keys)} unresolved, "
        f"{batch_count} from batch stats, {computed_count} from scoring rules"
    )
    return enriched


class ScoreResolver:
    """Scores raw roster records and enriches them from league data."""

    def __init__(self, scoring_rules: Optional[ScoringRules] = None):
        self.scoring_rules = _rule_weights(scoring_rules)

    def score_players(self, records: Iterable[Dict[str, Any]]) -> List[Player]:
        """Score every raw record with the per-player fallback chain."""
        return [score_player(record) for record in records if isinstance(record, dict)]

    def enrich(self, players: List[Player], stats_source: Optional[StatsSource] = None) -> List[Player]:
        """Run batch enrichment using this resolver's scoring rules."""
        return resolve_batch(players, self.scoring_rules, stats_source)
