from datetime import datetime, timedelta, timezone


def iso_in(days: float) -> str:
    """ISO timestamp ``days`` from now (negative for the past)."""
    return (datetime.now(timezone.utc) + timedelta(days=days)).replace(microsecond=0).isoformat()
