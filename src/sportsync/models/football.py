"""Sports entities mirrored from API-Football into the backend."""
from datetime import date, datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Country(SQLModel, table=True):
    __tablename__ = "countries"

    country_id: int = Field(primary_key=True)  # hash of code (or name)
    name: str
    code: str
    flag_url: Optional[str] = None


class Season(SQLModel, table=True):
    __tablename__ = "seasons"

    season_year: int = Field(primary_key=True)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class League(SQLModel, table=True):
    __tablename__ = "leagues"

    league_id: int = Field(primary_key=True)
    season_year: int = Field(primary_key=True)
    name: str
    country_id: int
    type: Optional[str] = None  # "League" or "Cup"
    logo_url: Optional[str] = None


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    team_id: int = Field(primary_key=True)
    name: str
    country_id: Optional[int] = None
    founded_year: Optional[int] = None
    venue_id: Optional[int] = None
    logo_url: Optional[str] = None


class Fixture(SQLModel, table=True):
    __tablename__ = "fixtures"

    fixture_id: int = Field(primary_key=True)
    league_id: int
    season_year: int
    date_utc: datetime
    status: str  # API short status: "NS", "1H", "FT", ...
    home_team_id: int
    away_team_id: int
    venue_id: Optional[int] = None
    referee: Optional[str] = None
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None


def to_row(entity: SQLModel) -> dict:
    """JSON-ready dict for a REST upsert; unset optional columns are omitted."""
    return entity.model_dump(mode="json", exclude_none=True)
