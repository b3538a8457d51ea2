"""
Yahoo Fantasy Sports API client for fantasy football.
Fetches league settings, weekly rosters and batch stats as plain nested dicts.
"""

import logging
import warnings
from typing import List, Dict, Optional, Any

import requests
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from bs4.element import Tag

from ..data.models import LeagueSettings, RosterSlot, ScoringRule
from ..config.settings import BotConfig, MAX_BATCH_SIZE

logger = logging.getLogger(__name__)


class YahooAPIError(Exception):
    """Raised when a Yahoo request fails or returns an unreadable payload."""


def _as_list(value: Any) -> List[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _element_to_value(element: Tag) -> Any:
    """Convert an element to a string (plain leaf) or a dict of attributes and children."""
    result: Dict[str, Any] = {}
    for name, value in element.attrs.items():
        result[f"@{name}"] = " ".join(value) if isinstance(value, list) else value

    children = [child for child in element.children if isinstance(child, Tag)]
    if not children:
        text = element.get_text().strip()
        if not result:
            return text
        if text:
            result["#text"] = text
        return result

    for child in children:
        value = _element_to_value(child)
        if child.name not in result:
            result[child.name] = value
        elif isinstance(result[child.name], list):
            result[child.name].append(value)
        else:
            result[child.name] = [result[child.name], value]
    return result


def xml_to_dict(xml_text: str) -> Dict[str, Any]:
    """Parse a Yahoo XML document into {root_tag: value}."""
    # Yahoo payloads contain no HTML void element names, so html.parser reads them intact
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(xml_text, 'html.parser')
    root = next((child for child in soup.children if isinstance(child, Tag)), None)
    if root is None:
        raise YahooAPIError("Response did not contain an XML document")
    return {root.name: _element_to_value(root)}


class YahooFantasyClient:
    """Yahoo Fantasy Sports API client."""

    def __init__(self, config: BotConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.yahoo_api.base_url.rstrip('/')
        self.timeout = config.yahoo_api.timeout
        self.batch_size = min(max(int(config.batch_size), 1), MAX_BATCH_SIZE)
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': config.yahoo_api.user_agent})
        if config.yahoo_api.access_token:
            self.session.headers.update({'Authorization': f'Bearer {config.yahoo_api.access_token}'})

    def _get(self, path: str) -> Dict[str, Any]:
        """GET a resource and return the contents of <fantasy_content>."""
        if 'Authorization' not in self.session.headers:
            raise YahooAPIError("No Yahoo access token configured")

        url = f"{self.base_url}/{path}"
        logger.debug(f"Requesting {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise YahooAPIError(f"Request to {url} failed: {e}") from e

        document = xml_to_dict(response.text)
        content = document.get('fantasy_content')
        if not isinstance(content, dict):
            raise YahooAPIError(f"Unexpected response from {url}: missing fantasy_content")
        return content

    def fetch_league_settings(self, league_key: str) -> LeagueSettings:
        """Get roster positions and stat modifiers for a league."""
        if not league_key:
            raise ValueError("league_key is required")

        content = self._get(f"league/{league_key}/settings")
        league_data = content.get('league') or {}
        settings_data = league_data.get('settings') or {}

        roster_positions: Dict[str, int] = {}
        for entry in _as_list((settings_data.get('roster_positions') or {}).get('roster_position')):
            if not isinstance(entry, dict) or not entry.get('position'):
                continue
            try:
                count = int(entry.get('count', 1))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring roster position with bad count: {entry}")
                continue
            position = str(entry['position'])
            roster_positions[position] = roster_positions.get(position, 0) + count

        scoring_settings: Dict[str, float] = {}
        stat_modifiers = (settings_data.get('stat_modifiers') or {}).get('stats') or {}
        for stat in _as_list(stat_modifiers.get('stat')):
            if not isinstance(stat, dict) or not stat.get('stat_id'):
                continue
            try:
                scoring_settings[str(stat['stat_id'])] = float(stat.get('value', 0))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring stat modifier with bad value: {stat}")

        season = league_data.get('season')
        current_week = league_data.get('current_week')
        settings = LeagueSettings(
            league_key=league_key,
            name=league_data.get('name') or 'Unknown League',
            season=int(season) if str(season or '').isdigit() else None,
            current_week=int(current_week) if str(current_week or '').isdigit() else None,
            roster_positions=roster_positions,
            scoring_settings=scoring_settings
        )
        logger.info(
            f"Loaded settings for {settings.name}: {len(roster_positions)} roster positions, "
            f"{len(scoring_settings)} stat modifiers"
        )
        return settings

    def fetch_league_slot_configuration(self, league_key: str) -> List[RosterSlot]:
        """Get the league's starting slots, one entry per slot."""
        return self.fetch_league_settings(league_key).starting_slots()

    def fetch_league_scoring_rules(self, league_key: str) -> List[ScoringRule]:
        """Get the league's stat id -> points weights."""
        return self.fetch_league_settings(league_key).scoring_rules()

    def fetch_weekly_roster(self, team_key: str, week: int, is_projected: bool = False) -> List[Dict[str, Any]]:
        """Get raw player records, with stats and points, for a team's roster in a given week."""
        if not team_key:
            raise ValueError("team_key is required")

        content = self._get(f"team/{team_key}/roster;week={week}/players/{self._stats_resource(week, is_projected)}")
        team_data = content.get('team') or {}
        roster = team_data.get('roster') or {}
        players = (roster.get('players') or {}) if isinstance(roster, dict) else {}
        records = [record for record in _as_list(players.get('player')) if isinstance(record, dict)]

        logger.info(f"Retrieved {len(records)} players from roster {team_key} for week {week}")
        return records

    def fetch_batch_stats(self, player_keys: List[str], week: int, is_projected: bool = False) -> List[Dict[str, Any]]:
        """Get raw stat lines for many players, chunked to Yahoo's per-request key limit."""
        keys = [key for key in player_keys if key]
        stat_lines: List[Dict[str, Any]] = []

        for start in range(0, len(keys), self.batch_size):
            chunk = keys[start:start + self.batch_size]
            content = self._get(
                f"players;player_keys={','.join(chunk)}/{self._stats_resource(week, is_projected)}"
            )
            players = content.get('players') or {}
            if isinstance(players, dict):
                stat_lines.extend(line for line in _as_list(players.get('player')) if isinstance(line, dict))

        logger.info(f"Retrieved {len(stat_lines)} stat lines for {len(keys)} players")
        return stat_lines

    def _stats_resource(self, week: int, is_projected: bool) -> str:
        resource = f"stats;type=week;week={week}"
        if is_projected:
            resource += ";is_projected=1"
        return resource
