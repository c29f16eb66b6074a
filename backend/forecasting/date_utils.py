import calendar
from datetime import datetime


def add_months(year: int, month: int, n: int):
    """
    Add n months to given (year, month)
    Returns new (year, month)
    """
    new_month = month + n
    new_year = year + (new_month - 1) // 12
    new_month = ((new_month - 1) % 12) + 1
    return new_year, new_month


def parse_period(period: str):
    year, month = map(int, period.split("-"))
    return year, month


def format_period(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_period(period: str, n: int) -> str:
    """'2024-12' shifted by 1 -> '2025-01'"""
    return format_period(*add_months(*parse_period(period), n))


def months_before(moment: datetime, n: int) -> datetime:
    """Same day-of-month n months earlier, clamped to the month's last day."""
    year, month = add_months(moment.year, moment.month, -n)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
