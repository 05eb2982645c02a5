"""Conversions from database rows (snake_case columns) to API response models."""
from typing import Any, Dict, Optional

from covid_portal.schemas import District, State, StateStats


def _optional_int(value: Any) -> Optional[int]:
    # PostgreSQL returns SUM(bigint) as Decimal
    return None if value is None else int(value)


# PUBLIC_INTERFACE
def state_from_row(row: Dict[str, Any]) -> State:
    return State(
        state_id=row["state_id"],
        state_name=row.get("state_name"),
        population=row.get("population"),
    )


# PUBLIC_INTERFACE
def district_from_row(row: Dict[str, Any]) -> District:
    return District(
        district_id=row["district_id"],
        district_name=row.get("district_name"),
        state_id=row.get("state_id"),
        cases=row.get("cases"),
        cured=row.get("cured"),
        active=row.get("active"),
        deaths=row.get("deaths"),
    )


# PUBLIC_INTERFACE
def stats_from_row(row: Dict[str, Any]) -> StateStats:
    """Aggregate row -> StateStats. SUM over no rows is NULL and stays None."""
    return StateStats(
        total_cases=_optional_int(row.get("total_cases")),
        total_cured=_optional_int(row.get("total_cured")),
        total_active=_optional_int(row.get("total_active")),
        total_deaths=_optional_int(row.get("total_deaths")),
    )
