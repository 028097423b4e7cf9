from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta

BILLING_PERIOD = relativedelta(months=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def next_due_date(paid_on: date) -> date:
    return paid_on + BILLING_PERIOD


def billing_period_label(paid_at: date) -> str:
    return f"{paid_at.strftime('%B').upper()} {paid_at.year}"


def normalize_city(city: str | None) -> str | None:
    if city is None:
        return None
    return " ".join(city.split()).title()
