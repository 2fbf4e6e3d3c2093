"""
Tests for the data service - game day records, assignments, stored standings and read models.
"""
from datetime import date

import pytest
from sqlalchemy import select

from ladder_league.database.models import CourtAssignment, GameDayAttendance, Standing
from ladder_league.services import data_service, game_day_service
from ladder_league.services.errors import NotFoundError, PreconditionFailedError

# db_session, ladder_day and no_background_jobs fixtures are provided by conftest.py


async def play_game_day(session, league_id, game_day_id, scores):
    """Generate rotations, enter scores in game order and store standings."""
    await game_day_service.generate_rotations_async(session, league_id, game_day_id)
    rotations = await data_service.load_court_rotations(session, league_id, game_day_id)
    for rotation, (team1_score, team2_score) in zip(rotations, scores):
        await game_day_service.record_rotation_score(session, rotation.id, team1_score, team2_score)
    await data_service.calculate_game_day_standings_async(session, league_id, game_day_id)


# Game days

@pytest.mark.asyncio
async def test_generate_game_days_weekly_and_clipped(db_session):
    league = await data_service.create_league(
        db_session, name="Ladder", start_date="2025-06-02", end_date="2025-06-30", play_day=2
    )

    created = await data_service.generate_game_days(db_session, league.id, "2025-06-01", "2025-07-31")

    assert [gd["date"] for gd in created] == ["2025-06-04", "2025-06-11", "2025-06-18", "2025-06-25"]
    assert all(gd["status"] == "pending" for gd in created)
    assert all(gd["is_finalized"] is False for gd in created)
    assert created[0]["start_time"] == "07:00"
    assert created[0]["end_time"] == "10:00"


@pytest.mark.asyncio
async def test_generate_game_days_skips_existing_dates(db_session):
    league = await data_service.create_league(db_session, name="Ladder", play_day=0)
    await data_service.create_game_day(db_session, league.id, date(2025, 6, 9))

    created = await data_service.generate_game_days(db_session, league.id, "2025-06-01", "2025-06-20")

    assert [gd["date"] for gd in created] == ["2025-06-02", "2025-06-16"]
    listed = await data_service.list_game_days(db_session, league.id)
    assert [gd["date"] for gd in listed] == ["2025-06-02", "2025-06-09", "2025-06-16"]


@pytest.mark.asyncio
async def test_generate_game_days_explicit_play_day(db_session):
    league = await data_service.create_league(db_session, name="Ladder")

    created = await data_service.generate_game_days(
        db_session, league.id, "2025-06-01", "2025-06-14", play_day=5
    )

    assert [gd["date"] for gd in created] == ["2025-06-07", "2025-06-14"]


@pytest.mark.asyncio
async def test_generate_game_days_requires_play_day(db_session):
    league = await data_service.create_league(db_session, name="Ladder")
    with pytest.raises(ValueError):
        await data_service.generate_game_days(db_session, league.id, "2025-06-01", "2025-06-30")


@pytest.mark.asyncio
async def test_generate_game_days_unknown_league(db_session):
    with pytest.raises(NotFoundError):
        await data_service.generate_game_days(db_session, 9999, "2025-06-01", "2025-06-30", 1)


@pytest.mark.asyncio
async def test_create_league_rejects_unknown_win_type(db_session):
    with pytest.raises(ValueError):
        await data_service.create_league(db_session, name="Ladder", win_type="elo")


# Court configuration and assignments

@pytest.mark.asyncio
async def test_update_court_size_creates_then_updates(db_session):
    league = await data_service.create_league(db_session, name="Ladder")

    created = await data_service.update_court_size(db_session, league.id, 3, 5)
    assert created["display_name"] == "Court 3"
    assert created["players_count"] == 5
    assert created["players_moving_up"] == 1
    assert created["players_moving_down"] == 1

    updated = await data_service.update_court_size(db_session, league.id, 3, 4, display_name="Bronze")
    assert updated["id"] == created["id"]
    assert updated["players_count"] == 4
    assert updated["display_name"] == "Bronze"

    configs = await data_service.load_court_configurations(db_session, league.id)
    assert len(configs) == 1


@pytest.mark.asyncio
async def test_update_court_size_rejects_empty_court(db_session):
    league = await data_service.create_league(db_session, name="Ladder")
    with pytest.raises(ValueError):
        await data_service.update_court_size(db_session, league.id, 1, 0)


@pytest.mark.asyncio
async def test_save_court_assignments_numbers_slots(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]

    saved = await data_service.save_court_assignments(
        db_session,
        league.id,
        game_day.id,
        {
            1: [
                {"player_id": players[3].id},
                {"player_id": players[0].id, "is_substitute": True, "substitute_name": "Zed"},
            ],
        },
    )

    assert [(a["court_number"], a["slot_number"], a["player_id"]) for a in saved] == [
        (1, 1, players[3].id),
        (1, 2, players[0].id),
    ]
    assert saved[1]["is_substitute"] is True
    assert saved[1]["substitute_name"] == "Zed"

    rows = (await db_session.execute(select(CourtAssignment))).scalars().all()
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_save_court_assignments_rejects_duplicate_player(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]
    with pytest.raises(ValueError):
        await data_service.save_court_assignments(
            db_session,
            league.id,
            game_day.id,
            {1: [{"player_id": players[0].id}], 2: [{"player_id": players[0].id}]},
        )


@pytest.mark.asyncio
async def test_save_court_assignments_rejected_after_rotations(db_session, ladder_day):
    league, game_day = ladder_day["league"], ladder_day["game_day"]
    await game_day_service.generate_rotations_async(db_session, league.id, game_day.id)

    with pytest.raises(PreconditionFailedError):
        await data_service.save_court_assignments(db_session, league.id, game_day.id, {})


# Standings

@pytest.mark.asyncio
async def test_calculate_game_day_standings_stores_rows(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]

    await play_game_day(db_session, league.id, game_day.id, [(11, 5), (11, 7), (9, 11)] * 2)

    standings = await data_service.get_game_day_standings(db_session, league.id, game_day.id)
    assert len(standings) == 8
    top = standings[0]
    assert top["player_id"] == players[0].id
    assert top["court_number"] == 1
    assert top["court_rank"] == 1
    assert top["total_points"] == 31
    assert top["games_won"] == 2
    assert top["win_pct"] == 66.67
    assert top["movement"] == "up"


@pytest.mark.asyncio
async def test_recalculating_standings_replaces_rows(db_session, ladder_day):
    league, game_day = ladder_day["league"], ladder_day["game_day"]
    await play_game_day(db_session, league.id, game_day.id, [(11, 5), (11, 7), (9, 11)] * 2)

    rotations = await data_service.load_court_rotations(db_session, league.id, game_day.id, court_number=1)
    await game_day_service.record_rotation_score(db_session, rotations[0].id, 0, 11)
    result = await data_service.calculate_game_day_standings_async(db_session, league.id, game_day.id)

    assert result["player_count"] == 8
    rows = (await db_session.execute(select(Standing))).scalars().all()
    assert len(rows) == 8
    standings = await data_service.get_game_day_standings(db_session, league.id, game_day.id)
    player1 = [s for s in standings if s["player_id"] == ladder_day["players"][0].id][0]
    assert player1["total_points"] == 0 + 11 + 9


@pytest.mark.asyncio
async def test_calculate_standings_unknown_game_day_writes_nothing(db_session, ladder_day):
    with pytest.raises(NotFoundError):
        await data_service.calculate_game_day_standings_async(db_session, ladder_day["league"].id, 9999)
    with pytest.raises(NotFoundError):
        await data_service.calculate_game_day_standings_async(db_session, 9999, ladder_day["game_day"].id)

    rows = (await db_session.execute(select(Standing))).scalars().all()
    assert rows == []


# Read models

@pytest.mark.asyncio
async def test_game_day_rankings_include_game_scores(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]
    # Court 2 game 3 left unscored
    await play_game_day(
        db_session, league.id, game_day.id,
        [(11, 5), (11, 7), (9, 11), (11, 2), (4, 11), (None, None)],
    )

    rankings = await data_service.get_game_day_rankings(db_session, league.id, game_day.id)

    assert [r["court_number"] for r in rankings] == [1, 1, 1, 1, 2, 2, 2, 2]
    court1_points = [r["total_points"] for r in rankings[:4]]
    assert court1_points == sorted(court1_points, reverse=True)

    by_id = {r["player_id"]: r for r in rankings}
    assert by_id[players[0].id]["game_scores"] == [11, 11, 9]
    assert by_id[players[0].id]["first_name"] == "Alice"
    assert by_id[players[0].id]["last_name"] == "Adams"
    assert by_id[players[4].id]["game_scores"] == [11, 4, None]


@pytest.mark.asyncio
async def test_next_week_court_assignments(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]
    await play_game_day(db_session, league.id, game_day.id, [(11, 5), (11, 7), (9, 11)] * 2)

    next_week = await data_service.get_next_week_court_assignments(db_session, league.id, game_day.id)
    by_id = {a["player_id"]: a for a in next_week}

    # Court 1 winner cannot go above court 1; court 2 loser cannot go below court 2
    assert by_id[players[0].id]["movement"] == "up"
    assert by_id[players[0].id]["next_court_number"] == 1
    assert by_id[players[2].id]["movement"] == "down"
    assert by_id[players[2].id]["next_court_number"] == 2
    assert by_id[players[4].id]["movement"] == "up"
    assert by_id[players[4].id]["next_court_number"] == 1
    assert by_id[players[6].id]["next_court_number"] == 2

    assert [a["next_court_number"] for a in next_week] == [1, 1, 1, 1, 2, 2, 2, 2]
    court1_last_names = [a["last_name"] for a in next_week[:4]]
    assert court1_last_names == sorted(court1_last_names)


@pytest.mark.asyncio
async def test_season_rankings_across_game_days(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]
    await play_game_day(db_session, league.id, game_day.id, [(11, 5), (11, 7), (9, 11)] * 2)

    second_day = await data_service.create_game_day(db_session, league.id, "2025-06-11")
    await data_service.save_court_assignments(
        db_session,
        league.id,
        second_day.id,
        {1: [{"player_id": p.id} for p in players[:4]]},
    )
    await play_game_day(db_session, league.id, second_day.id, [(11, 0), (11, 0), (11, 0)])

    rankings = await data_service.get_season_rankings(db_session, league.id)

    assert len(rankings) == 8
    top = rankings[0]
    assert top["player_id"] == players[0].id
    assert top["player_name"] == "Alice Adams"
    assert top["total_points"] == 31 + 33
    assert top["total_games_won"] == 5
    assert top["total_games_played"] == 6
    assert top["weeks_played"] == 2
    assert top["weekly_avg_points"] == 32.0
    assert top["avg_points_per_game"] == 10.67

    points = [r["total_points"] for r in rankings]
    assert points == sorted(points, reverse=True)


@pytest.mark.asyncio
async def test_season_rankings_unknown_league(db_session):
    with pytest.raises(NotFoundError):
        await data_service.get_season_rankings(db_session, 9999)


def test_register_stats_queue_callbacks():
    from ladder_league.services.stats_queue import get_stats_queue

    data_service.register_stats_queue_callbacks()

    assert get_stats_queue()._game_day_calc_callback is data_service.calculate_game_day_standings_async


@pytest.mark.asyncio
async def test_list_leagues_sorted_by_name(db_session):
    await data_service.create_league(db_session, name="Thursday Ladder", play_day=3)
    await data_service.create_league(db_session, name="Monday Ladder", play_day=0, win_type="wins")

    leagues = await data_service.list_leagues(db_session)

    assert [league["name"] for league in leagues] == ["Monday Ladder", "Thursday Ladder"]
    assert leagues[0]["win_type"] == "wins"
    assert leagues[0]["players_per_court"] == 4


@pytest.mark.asyncio
async def test_create_league_validates_game_counts(db_session):
    with pytest.raises(ValueError):
        await data_service.create_league(db_session, name="Ladder", games_per_match=-1)
    with pytest.raises(ValueError):
        await data_service.create_league(db_session, name="Ladder", games_per_rotation=0)

    league = await data_service.create_league(db_session, name="Ladder", games_per_match=0)
    assert league.games_per_match == 0


# Attendance

@pytest.mark.asyncio
async def test_mark_attendance_creates_then_updates(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]

    marked = await data_service.mark_attendance(db_session, league.id, game_day.id, players[1].id, False)
    assert marked["is_present"] is False
    assert marked["player_name"] == "Ben Brown"

    await data_service.mark_attendance(db_session, league.id, game_day.id, players[1].id, True)

    attendance = await data_service.load_attendance(db_session, league.id, game_day.id)
    assert attendance == {players[1].id: True}
    rows = (await db_session.execute(select(GameDayAttendance))).scalars().all()
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_game_day_attendance_defaults_to_present(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]
    await data_service.mark_attendance(db_session, league.id, game_day.id, players[5].id, False)

    attendance = await data_service.get_game_day_attendance(db_session, league.id, game_day.id)

    assert [a["player_id"] for a in attendance] == [p.id for p in players]
    absent = [a["player_id"] for a in attendance if not a["is_present"]]
    assert absent == [players[5].id]
    assert attendance[5]["court_number"] == 2
    assert attendance[0]["last_name"] == "Adams"


@pytest.mark.asyncio
async def test_mark_attendance_unknown_player(db_session, ladder_day):
    with pytest.raises(NotFoundError):
        await data_service.mark_attendance(
            db_session, ladder_day["league"].id, ladder_day["game_day"].id, 9999, True
        )
    with pytest.raises(NotFoundError):
        await data_service.mark_attendance(
            db_session, ladder_day["league"].id, 9999, ladder_day["players"][0].id, True
        )


@pytest.mark.asyncio
async def test_mark_player_absent_flags_standing(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]
    await play_game_day(db_session, league.id, game_day.id, [(11, 5), (11, 7), (9, 11)] * 2)

    result = await data_service.mark_player_absent(db_session, league.id, game_day.id, players[2].id)

    assert result["standing_updated"] is True
    assert result["is_present"] is False
    standings = await data_service.get_game_day_standings(db_session, league.id, game_day.id)
    by_id = {s["player_id"]: s for s in standings}
    assert by_id[players[2].id]["is_substitute"] is True
    assert by_id[players[2].id]["substitute_name"] == "ABSENT"
    assert by_id[players[1].id]["is_substitute"] is False

    attendance = await data_service.load_attendance(db_session, league.id, game_day.id)
    assert attendance[players[2].id] is False


@pytest.mark.asyncio
async def test_absent_flag_survives_recalculation(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]
    await play_game_day(db_session, league.id, game_day.id, [(11, 5), (11, 7), (9, 11)] * 2)
    await data_service.mark_player_absent(db_session, league.id, game_day.id, players[2].id)

    await data_service.calculate_game_day_standings_async(db_session, league.id, game_day.id)

    standings = await data_service.get_game_day_standings(db_session, league.id, game_day.id)
    absent = [s for s in standings if s["substitute_name"] == "ABSENT"]
    assert [s["player_id"] for s in absent] == [players[2].id]
    assert absent[0]["is_substitute"] is True


@pytest.mark.asyncio
async def test_mark_player_absent_without_standings(db_session, ladder_day):
    league, game_day, players = ladder_day["league"], ladder_day["game_day"], ladder_day["players"]

    result = await data_service.mark_player_absent(db_session, league.id, game_day.id, players[0].id)

    assert result["standing_updated"] is False
    attendance = await data_service.load_attendance(db_session, league.id, game_day.id)
    assert attendance == {players[0].id: False}
