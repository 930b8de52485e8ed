from datetime import datetime, timezone


def now() -> datetime:
    return datetime.now(timezone.utc)


def clean(value: str | None) -> str:
    return (value or "").strip()


def none_if_empty(value: str | None) -> str | None:
    """Trim and store blanks as NULL."""
    value = clean(value)
    return value or None
