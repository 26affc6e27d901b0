"""
Runtime settings read from the environment.
"""

import os

from .positions import get_current_season


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Season the pick game is played in
SEASON = int(os.getenv("PICKEM_SEASON", str(get_current_season())))

# Playoff weeks are indexed 1..TOTAL_WEEKS (wild card through the Super Bowl)
TOTAL_WEEKS = int(os.getenv("PICKEM_TOTAL_WEEKS", "4"))

# Monte Carlo settings
ODDS_SIMULATIONS = int(os.getenv("ODDS_SIMULATIONS", "10000"))
ODDS_VARIANCE_FACTOR = float(os.getenv("ODDS_VARIANCE_FACTOR", "0.35"))
ODDS_SHARDS = int(os.getenv("ODDS_SHARDS", "1"))

# Odds are cached briefly; they are a projection, not a fact
ODDS_CACHE_TTL_MINUTES = int(os.getenv("ODDS_CACHE_TTL_MINUTES", "5"))
