"""Leaderboard ranking."""

from collections.abc import Iterable

from beer_tracker.domain.consumption import LeaderboardRow
from beer_tracker.domain.drinks import DrinkEvent
from beer_tracker.domain.models import UserRecord
from beer_tracker.services.time_ranges import validate_events


def rank_users(
    users: list[UserRecord], events: Iterable[DrinkEvent]
) -> list[LeaderboardRow]:
    """Rank users by liters, highest first; ties keep roster order."""
    liters_by_user = {user.id: 0.0 for user in users}
    for event in validate_events(events):
        if event.user_id in liters_by_user:
            liters_by_user[event.user_id] += event.volume_ml
    totals = [(user, liters_by_user[user.id] / 1000) for user in users]
    group_total = sum(liters for _, liters in totals)
    ranked = sorted(totals, key=lambda item: item[1], reverse=True)
    return [
        LeaderboardRow(
            user=user,
            liters=liters,
            percent_of_group_total=(
                liters / group_total * 100 if group_total > 0 else 0.0
            ),
        )
        for user, liters in ranked
    ]
