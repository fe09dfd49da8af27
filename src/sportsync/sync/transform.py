"""
Map API-Football payload items onto backend rows.

API-Football has no numeric id for countries, so country ids are derived
from the country code (or the name when the code is null) with a 32-bit
string hash. The same hash is applied to team and league country names,
so those references only line up when the API reports a matching value.
"""
from datetime import date, datetime
from typing import Any, Dict, Optional

from sportsync.models.football import Country, Fixture, League, Season, Team


def hash_code(value: str) -> int:
    """Absolute value of the signed 32-bit `h = 31*h + ch` string hash."""
    h = 0
    for ch in value:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def transform_country(raw: Dict[str, Any]) -> Country:
    code = raw.get("code")
    name = raw["name"]
    return Country(
        country_id=hash_code(code or name),
        name=name,
        code=code or name[:3].upper(),
        flag_url=raw.get("flag"),
    )


def transform_league(raw: Dict[str, Any], default_season: Optional[int] = None) -> League:
    league = raw["league"]
    country = raw["country"]
    seasons = raw.get("seasons") or []
    season_year = seasons[0].get("year") if seasons else None
    return League(
        league_id=league["id"],
        name=league["name"],
        country_id=hash_code(country.get("code") or country["name"]),
        season_year=season_year or default_season or date.today().year,
        type=league.get("type"),
        logo_url=league.get("logo"),
    )


def transform_team(raw: Dict[str, Any]) -> Team:
    team = raw["team"]
    venue = raw.get("venue") or {}
    return Team(
        team_id=team["id"],
        name=team["name"],
        country_id=hash_code(team["country"]) if team.get("country") else None,
        founded_year=team.get("founded"),
        venue_id=venue.get("id"),
        logo_url=team.get("logo"),
    )


def transform_fixture(raw: Dict[str, Any]) -> Fixture:
    fixture = raw["fixture"]
    goals = raw.get("goals") or {}
    venue = fixture.get("venue") or {}
    return Fixture(
        fixture_id=fixture["id"],
        league_id=raw["league"]["id"],
        season_year=raw["league"]["season"],
        date_utc=datetime.fromisoformat(fixture["date"].replace("Z", "+00:00")),
        status=fixture["status"]["short"],
        home_team_id=raw["teams"]["home"]["id"],
        away_team_id=raw["teams"]["away"]["id"],
        venue_id=venue.get("id"),
        referee=fixture.get("referee"),
        home_goals=goals.get("home"),
        away_goals=goals.get("away"),
    )


def season_for(year: int) -> Season:
    """Season row spanning Aug 1 of `year` to Jul 31 of the next year."""
    return Season(
        season_year=year,
        start_date=date(year, 8, 1),
        end_date=date(year + 1, 7, 31),
    )
