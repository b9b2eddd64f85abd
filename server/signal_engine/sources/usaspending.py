"""
USASpending.gov Award Search Source

Department of Defense contract awards, largest first. No credential.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from signal_engine.models.contracts import ContractAward
from signal_engine.sources.base import HttpSourceClient, expect_object

SOURCE_NAME = "usaspending"

MAX_CONTRACT_DAYS = 365
MAX_CONTRACT_LIMIT = 100

AWARD_FIELDS = [
    "Award ID",
    "Recipient Name",
    "Award Amount",
    "Description",
    "Start Date",
    "End Date",
    "Awarding Agency",
    "Awarding Sub Agency",
    "Award Type",
    "Contract Award Type",
]


@dataclass(frozen=True)
class ContractQuery:
    days: int = 30
    min_amount: float = 1_000_000
    limit: int = 20

    def __post_init__(self) -> None:
        if not (1 <= self.days <= MAX_CONTRACT_DAYS):
            raise ValueError(f"days must be in [1, {MAX_CONTRACT_DAYS}], got {self.days}")
        if self.min_amount < 0:
            raise ValueError(f"min_amount must be non-negative, got {self.min_amount}")
        if not (1 <= self.limit <= MAX_CONTRACT_LIMIT):
            raise ValueError(f"limit must be in [1, {MAX_CONTRACT_LIMIT}], got {self.limit}")

    def __str__(self) -> str:
        return f"{self.days}d>={self.min_amount:.0f}"


def build_search_body(query: ContractQuery, today=None) -> dict[str, Any]:
    end = today or datetime.now(timezone.utc).date()
    start = end - timedelta(days=query.days)
    return {
        "filters": {
            "time_period": [{"start_date": start.isoformat(), "end_date": end.isoformat()}],
            "award_type_codes": ["A", "B", "C", "D"],
            "agencies": [
                {"type": "awarding", "tier": "toptier", "name": "Department of Defense"}
            ],
            "award_amounts": [{"lower_bound": query.min_amount}],
        },
        "fields": AWARD_FIELDS,
        "page": 1,
        "limit": query.limit,
        "sort": "Award Amount",
        "order": "desc",
    }


def _field(row: dict[str, Any], name: str) -> Any:
    """Rows come back keyed by display name; older payloads use underscores."""
    if name in row:
        return row[name]
    return row.get(name.replace(" ", "_"))


def normalize_award(row: dict[str, Any]) -> ContractAward:
    award_id = _field(row, "Award ID") or ""
    internal_id = row.get("generated_internal_id") or award_id
    try:
        amount = float(_field(row, "Award Amount") or 0)
    except (TypeError, ValueError):
        amount = 0.0

    return ContractAward(
        id=str(internal_id),
        award_id=str(award_id),
        recipient=_field(row, "Recipient Name") or "",
        amount=amount,
        description=_field(row, "Description") or "",
        start_date=_field(row, "Start Date") or "",
        end_date=_field(row, "End Date") or "",
        awarding_agency=_field(row, "Awarding Agency") or "",
        awarding_sub_agency=_field(row, "Awarding Sub Agency") or "",
        award_type=_field(row, "Contract Award Type") or _field(row, "Award Type") or "",
    )


def normalize_awards(payload: dict[str, Any]) -> list[ContractAward]:
    """Rows without any identifier are dropped."""
    awards = []
    for row in expect_object(payload, SOURCE_NAME).get("results") or []:
        if not isinstance(row, dict):
            continue
        if not (row.get("generated_internal_id") or _field(row, "Award ID")):
            continue
        awards.append(normalize_award(row))
    return awards


class USASpendingClient(HttpSourceClient[ContractQuery, list[ContractAward]]):
    name = SOURCE_NAME
    action = "contracts"
    base_url = "https://api.usaspending.gov"

    async def _fetch(self, key: ContractQuery) -> list[ContractAward]:
        payload = await self._post_json(
            f"{self.base_url}/api/v2/search/spending_by_award/",
            build_search_body(key),
            headers={"Content-Type": "application/json"},
        )
        return normalize_awards(payload)
