"""
Database module.
"""

from .database import (
    engine,
    async_session_maker,
    get_db,
    create_tables,
    drop_tables
)
from .models import (
    Base,
    League,
    LeagueMember,
    PlayoffWeek,
    UserPick,
    PlayoffPlayer,
    PlayoffGame,
    PlayerWeekStat,
    ScoringSettings,
    OddsCache
)
from .repositories import (
    LeagueRepository,
    WeekRepository,
    PickRepository,
    PlayerRepository,
    GameRepository,
    StatRepository,
    ScoringSettingsRepository,
    OddsCacheRepository
)
from .providers import DatabaseProjectionProvider

__all__ = [
    # Database
    "engine",
    "async_session_maker",
    "get_db",
    "create_tables",
    "drop_tables",
    # Models
    "Base",
    "League",
    "LeagueMember",
    "PlayoffWeek",
    "UserPick",
    "PlayoffPlayer",
    "PlayoffGame",
    "PlayerWeekStat",
    "ScoringSettings",
    "OddsCache",
    # Repositories
    "LeagueRepository",
    "WeekRepository",
    "PickRepository",
    "PlayerRepository",
    "GameRepository",
    "StatRepository",
    "ScoringSettingsRepository",
    "OddsCacheRepository",
    # Providers
    "DatabaseProjectionProvider",
]
