"""JSON shapes returned by the API."""

from datetime import datetime, tzinfo

from beer_tracker.domain.bac import GroupBACRow, UserBACSeries
from beer_tracker.domain.consumption import (
    CumulativeConsumptionRow,
    DailyConsumptionRow,
    DrinkerProfile,
    LeaderboardRow,
    PurchaseHistory,
)
from beer_tracker.domain.drinks import DrinkEvent, EntryDeletion, PurchaseLot
from beer_tracker.domain.models import UserRecord
from beer_tracker.services.bac import bac_status
from beer_tracker.services.time_ranges import format_time_label


def serialize_user(user: UserRecord) -> dict[str, object]:
    return {"id": str(user.id), "name": user.name, "email": user.email}


def serialize_entry(entry: DrinkEvent) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "user_id": str(entry.user_id),
        "user_name": entry.user_name,
        "volume_ml": entry.volume_ml,
        "alcohol_percentage": entry.alcohol_percentage,
        "occurred_at": entry.occurred_at.isoformat(),
        "beer_type": entry.beer_type,
        "purchase_id": str(entry.purchase_id) if entry.purchase_id else None,
    }


def serialize_purchase(lot: PurchaseLot) -> dict[str, object]:
    return {
        "id": str(lot.id),
        "user_id": str(lot.user_id),
        "user_name": lot.user_name,
        "beer_name": lot.beer_name,
        "beer_type": lot.beer_type,
        "unit_size_ml": lot.unit_size_ml,
        "total_quantity": lot.total_quantity,
        "remaining_quantity": lot.remaining_quantity,
        "quantity_unit": lot.quantity_unit,
        "cost_per_unit": lot.cost_per_unit,
        "total_cost": lot.total_cost,
        "purchase_date": lot.purchase_date.isoformat(),
        "store_name": lot.store_name,
        "notes": lot.notes,
    }


def serialize_purchase_history(history: PurchaseHistory) -> dict[str, object]:
    return {
        "purchases": [serialize_purchase(lot) for lot in history.purchases],
        "total_spent": history.total_spent,
        "total_items": history.total_items,
    }


def serialize_deletion(deletion: EntryDeletion) -> dict[str, object]:
    return {
        "entry_id": str(deletion.entry_id),
        "purchase_id": str(deletion.purchase_id) if deletion.purchase_id else None,
        "quantity_restored": deletion.quantity_restored,
        "restore_error": deletion.restore_error,
    }


def serialize_user_series(entry: UserBACSeries, tz: tzinfo) -> dict[str, object]:
    series = entry.series
    return {
        "user_id": str(entry.user_id),
        "user_name": entry.user_name,
        "current_bac": series.current_bac,
        "status": bac_status(series.current_bac).value,
        "zero_bac_at": _isoformat(series.zero_bac_at),
        "samples": [
            {
                "timestamp": sample.timestamp_millis,
                "time": format_time_label(sample.timestamp, tz),
                "bac": sample.bac_permille,
            }
            for sample in series.samples
        ],
    }


def serialize_group_row(row: GroupBACRow) -> dict[str, object]:
    return {
        "timestamp": int(row.timestamp.timestamp() * 1000),
        "time": row.time_label,
        "bac_by_user": row.bac_by_user,
    }


def serialize_daily(row: DailyConsumptionRow) -> dict[str, object]:
    return {"date": row.day.isoformat(), "liters_by_user": row.liters_by_user}


def serialize_cumulative(row: CumulativeConsumptionRow) -> dict[str, object]:
    return {
        "timestamp": row.timestamp.isoformat(),
        "liters_by_user": row.liters_by_user,
    }


def serialize_leaderboard(rows: list[LeaderboardRow]) -> list[dict[str, object]]:
    return [
        {
            "rank": position,
            "user": serialize_user(row.user),
            "liters": row.liters,
            "percent_of_group_total": row.percent_of_group_total,
        }
        for position, row in enumerate(rows, start=1)
    ]


def serialize_profile(profile: DrinkerProfile) -> dict[str, object]:
    return {
        "user": serialize_user(profile.user),
        "total_liters": profile.total_liters,
        "drink_count": profile.drink_count,
        "average_size_ml": profile.average_size_ml,
        "preferred_beer_type": profile.preferred_beer_type,
        "recent_entries": [serialize_entry(entry) for entry in profile.recent_entries],
    }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
