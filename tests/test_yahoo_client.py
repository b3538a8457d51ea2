"""
Tests for the Yahoo Fantasy API client.
"""

import warnings

import pytest
from unittest.mock import Mock, patch
import requests
from bs4 import XMLParsedAsHTMLWarning

from fantasy_lineup.api.yahoo_client import YahooFantasyClient, YahooAPIError, xml_to_dict
from fantasy_lineup.config.settings import BotConfig, YahooAPIConfig
from fantasy_lineup.data.models import RosterSlot, ScoringRule
from fantasy_lineup.analysis.score_resolver import resolve_points


SETTINGS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<fantasy_content xml:lang="en-US" copyright="Data provided by Yahoo! and STATS, LLC">
  <league>
    <league_key>449.l.12345</league_key>
    <name>Sunday Funday</name>
    <season>2024</season>
    <current_week>5</current_week>
    <settings>
      <roster_positions>
        <roster_position><position>QB</position><position_type>O</position_type><count>1</count></roster_position>
        <roster_position><position>WR</position><position_type>O</position_type><count>2</count></roster_position>
        <roster_position><position>RB</position><position_type>O</position_type><count>2</count></roster_position>
        <roster_position><position>W/R/T</position><count>1</count></roster_position>
        <roster_position><position>K</position><position_type>K</position_type><count>1</count></roster_position>
        <roster_position><position>BN</position><count>6</count></roster_position>
        <roster_position><position>IR</position><count>1</count></roster_position>
      </roster_positions>
      <stat_modifiers>
        <stats>
          <stat><stat_id>4</stat_id><value>0.04</value></stat>
          <stat><stat_id>5</stat_id><value>4</value></stat>
          <stat><stat_id>6</stat_id><value>-1</value></stat>
        </stats>
      </stat_modifiers>
    </settings>
  </league>
</fantasy_content>
"""

ROSTER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<fantasy_content>
  <team>
    <team_key>449.l.12345.t.3</team_key>
    <roster>
      <coverage_type>week</coverage_type>
      <week>5</week>
      <players count="2">
        <player>
          <player_key>449.p.30123</player_key>
          <name><full>Patrick Mahomes</full><first>Patrick</first></name>
          <display_position>QB</display_position>
          <primary_position>QB</primary_position>
          <eligible_positions><position>QB</position></eligible_positions>
          <player_stats>
            <coverage_type>week</coverage_type>
            <stats><stat><stat_id>4</stat_id><value>301</value></stat></stats>
          </player_stats>
          <player_points><coverage_type>week</coverage_type><total>22.04</total></player_points>
        </player>
        <player>
          <player_key>449.p.40000</player_key>
          <name><full>Flex Guy</full></name>
          <primary_position>WR</primary_position>
          <eligible_positions><position>WR</position><position>RB</position><position>W/R/T</position></eligible_positions>
        </player>
      </players>
    </roster>
  </team>
</fantasy_content>
"""

PLAYERS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<fantasy_content>
  <players count="{count}">
    {players}
  </players>
</fantasy_content>
"""


def players_xml(*keys):
    players = "".join(
        f"<player><player_key>{key}</player_key><player_points total=\"5\"/></player>" for key in keys
    )
    return PLAYERS_XML.format(count=len(keys), players=players)


def mock_response(text, status_error=None):
    response = Mock()
    response.text = text
    if status_error:
        response.raise_for_status.side_effect = status_error
    else:
        response.raise_for_status.return_value = None
    return response


class TestXmlToDict:
    """Test cases for XML conversion."""

    def test_attributes_text_and_repeats(self):
        document = xml_to_dict(
            '<root a="1"><item>x</item><item>y</item><points total="7.5"/>'
            '<value unit="pts">3</value><empty></empty></root>'
        )

        root = document["root"]
        assert root["@a"] == "1"
        assert root["item"] == ["x", "y"]
        assert root["points"] == {"@total": "7.5"}
        assert root["value"] == {"@unit": "pts", "#text": "3"}
        assert root["empty"] == ""

    def test_attribute_total_feeds_resolver(self):
        player = xml_to_dict('<player><player_points total="11"><total>4</total></player_points></player>')["player"]

        assert resolve_points(player) == (11.0, "total_attribute")

    def test_xml_payload_parses_without_html_warning(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            document = xml_to_dict(SETTINGS_XML)

        assert document["fantasy_content"]["league"]["name"] == "Sunday Funday"
        assert not [w for w in caught if issubclass(w.category, XMLParsedAsHTMLWarning)]

    def test_no_document(self):
        with pytest.raises(YahooAPIError):
            xml_to_dict("   ")


class TestYahooFantasyClient:
    """Test cases for YahooFantasyClient."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config = BotConfig(
            league_key="449.l.12345",
            team_key="449.l.12345.t.3",
            batch_size=2,
            yahoo_api=YahooAPIConfig(access_token="token-123", base_url="https://example.test/fantasy/v2/")
        )
        self.client = YahooFantasyClient(self.config)

    def test_client_initialization(self):
        assert self.client.base_url == "https://example.test/fantasy/v2"
        assert self.client.session.headers['Authorization'] == "Bearer token-123"
        assert "FantasyLineupEngine" in self.client.session.headers['User-Agent']

    @patch('requests.Session.get')
    def test_fetch_league_settings(self, mock_get):
        mock_get.return_value = mock_response(SETTINGS_XML)

        settings = self.client.fetch_league_settings("449.l.12345")

        mock_get.assert_called_once_with(
            "https://example.test/fantasy/v2/league/449.l.12345/settings", timeout=30.0
        )
        assert settings.name == "Sunday Funday"
        assert settings.season == 2024
        assert settings.current_week == 5
        assert settings.roster_positions == {"QB": 1, "WR": 2, "RB": 2, "W/R/T": 1, "K": 1, "BN": 6, "IR": 1}
        assert settings.scoring_settings == {"4": 0.04, "5": 4.0, "6": -1.0}

    @patch('requests.Session.get')
    def test_fetch_league_slot_configuration(self, mock_get):
        mock_get.return_value = mock_response(SETTINGS_XML)

        slots = self.client.fetch_league_slot_configuration("449.l.12345")

        assert [slot.label for slot in slots] == ["QB", "WR", "WR", "RB", "RB", "W/R/T", "K"]
        assert all(isinstance(slot, RosterSlot) for slot in slots)

    @patch('requests.Session.get')
    def test_fetch_league_scoring_rules(self, mock_get):
        mock_get.return_value = mock_response(SETTINGS_XML)

        rules = self.client.fetch_league_scoring_rules("449.l.12345")

        assert rules == [ScoringRule("4", 0.04), ScoringRule("5", 4.0), ScoringRule("6", -1.0)]

    @patch('requests.Session.get')
    def test_fetch_weekly_roster(self, mock_get):
        mock_get.return_value = mock_response(ROSTER_XML)

        records = self.client.fetch_weekly_roster("449.l.12345.t.3", 5)

        url = mock_get.call_args[0][0]
        assert url.endswith("team/449.l.12345.t.3/roster;week=5/players/stats;type=week;week=5")
        assert len(records) == 2
        assert records[0]["name"]["full"] == "Patrick Mahomes"
        assert resolve_points(records[0]) == (22.04, "total_value")
        assert records[1]["eligible_positions"]["position"] == ["WR", "RB", "W/R/T"]
        assert resolve_points(records[1]) == (0.0, "none")

    @patch('requests.Session.get')
    def test_fetch_weekly_roster_projected(self, mock_get):
        mock_get.return_value = mock_response(ROSTER_XML)

        self.client.fetch_weekly_roster("449.l.12345.t.3", 5, is_projected=True)

        assert mock_get.call_args[0][0].endswith(";is_projected=1")

    @patch('requests.Session.get')
    def test_fetch_batch_stats_chunks_keys(self, mock_get):
        mock_get.side_effect = [
            mock_response(players_xml("p.1", "p.2")),
            mock_response(players_xml("p.3")),
        ]

        lines = self.client.fetch_batch_stats(["p.1", "p.2", "", "p.3"], 7)

        assert mock_get.call_count == 2
        first_url = mock_get.call_args_list[0][0][0]
        assert "players;player_keys=p.1,p.2/stats;type=week;week=7" in first_url
        assert [line["player_key"] for line in lines] == ["p.1", "p.2", "p.3"]
        assert all(resolve_points(line) == (5.0, "total_attribute") for line in lines)

    @patch('requests.Session.get')
    def test_fetch_batch_stats_no_keys(self, mock_get):
        assert self.client.fetch_batch_stats([], 1) == []
        mock_get.assert_not_called()

    @patch('requests.Session.get')
    def test_http_error_raises(self, mock_get):
        mock_get.return_value = mock_response("", status_error=requests.HTTPError("401 Unauthorized"))

        with pytest.raises(YahooAPIError):
            self.client.fetch_league_settings("449.l.12345")

    @patch('requests.Session.get')
    def test_connection_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(YahooAPIError):
            self.client.fetch_weekly_roster("449.l.12345.t.3", 1)

    @patch('requests.Session.get')
    def test_unexpected_document_raises(self, mock_get):
        mock_get.return_value = mock_response("<error><description>bad key</description></error>")

        with pytest.raises(YahooAPIError):
            self.client.fetch_league_settings("449.l.12345")

    def test_missing_token_raises(self):
        config = BotConfig(league_key="l", team_key="t", yahoo_api=YahooAPIConfig(access_token=None))
        client = YahooFantasyClient(config)

        with pytest.raises(YahooAPIError):
            client.fetch_league_settings("l")

    def test_missing_keys_raise(self):
        with pytest.raises(ValueError):
            self.client.fetch_league_settings("")
        with pytest.raises(ValueError):
            self.client.fetch_weekly_roster("", 1)


if __name__ == "__main__":
    pytest.main([__file__])
