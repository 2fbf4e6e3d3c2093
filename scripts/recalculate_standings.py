#!/usr/bin/env python3
"""
Recalculate stored standings for every completed game day.

This script:
1. Fetches all leagues from the database
2. Runs calculate_game_day_standings_async for each completed game day
3. Provides progress feedback and summary statistics

Usage:
    python scripts/recalculate_standings.py            # all leagues
    python scripts/recalculate_standings.py 3 7        # only leagues 3 and 7
"""

import asyncio
import os
import sys

# Add the project root to path (so ladder_league.* imports work)
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from ladder_league.database.db import AsyncSessionLocal, engine  # noqa: E402
from ladder_league.database.models import GameDayStatus  # noqa: E402
from ladder_league.services import data_service  # noqa: E402


async def recalculate_standings(league_ids=None):
    """Recalculate standings for completed game days."""
    async with AsyncSessionLocal() as session:
        print("=" * 60)
        print("Fetching leagues...")
        print("=" * 60)

        leagues = await data_service.list_leagues(session)
        if league_ids:
            leagues = [league for league in leagues if league["id"] in league_ids]

        if not leagues:
            print("No leagues found in the database.")
            return

        print(f"Found {len(leagues)} league(s)\n")

        successful = 0
        failed = []

        for idx, league in enumerate(leagues, 1):
            print(f"[{idx}/{len(leagues)}] {league['name']} (ID: {league['id']})")

            game_days = await data_service.list_game_days(session, league["id"])
            completed = [gd for gd in game_days if gd["status"] == GameDayStatus.COMPLETED.value]
            if not completed:
                print("   - No completed game days\n")
                continue

            for game_day in completed:
                try:
                    result = await data_service.calculate_game_day_standings_async(
                        session, league["id"], game_day["id"]
                    )
                    print(
                        f"   ok {game_day['date']}: {result['player_count']} players, "
                        f"{result['game_count']} games"
                    )
                    successful += 1
                except Exception as e:
                    print(f"   FAILED {game_day['date']}: {str(e)}")
                    failed.append((league["name"], game_day["date"], str(e)))

            print()

        print("=" * 60)
        print("Summary")
        print("=" * 60)
        print(f"Total leagues: {len(leagues)}")
        print(f"Game days recalculated: {successful}")
        print(f"Failed: {len(failed)}")

        if failed:
            print("\nFailed game days:")
            for league_name, game_day_date, error in failed:
                print(f"  - {league_name} {game_day_date}: {error}")

    await engine.dispose()


if __name__ == "__main__":
    ids = {int(arg) for arg in sys.argv[1:]}
    asyncio.run(recalculate_standings(ids or None))
