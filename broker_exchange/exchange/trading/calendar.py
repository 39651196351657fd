"""Calendar helpers for the simulated trading date. All arithmetic is UTC."""

from datetime import date, datetime, timedelta, timezone


def parse_instant(value: str) -> datetime:
    """Parse an ISO 8601 instant; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_instant(moment: datetime) -> str:
    """'2023-01-02T00:00:00.000Z'"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def next_day(moment: datetime) -> datetime:
    return moment + timedelta(days=1)


def format_trade_date(day) -> str:
    """Join key for historical data: M/D/YYYY without zero padding"""
    if isinstance(day, datetime):
        day = day.astimezone(timezone.utc).date() if day.tzinfo else day.date()
    if not isinstance(day, date):
        raise TypeError(f"Expected date or datetime, got {type(day).__name__}")
    return f"{day.month}/{day.day}/{day.year:04d}"
