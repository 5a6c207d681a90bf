"""
Display helpers shared by the account, card, expense and invoice screens.
"""
from datetime import date, datetime
from typing import Optional


def format_display_date(value: date | datetime | None) -> str:
    """'05 Mar 2025' style, or N/A when absent."""
    if value is None:
        return "N/A"
    return value.strftime("%d %b %Y")


def format_card_expiry(value: Optional[date]) -> str:
    """MM/YY, or N/A when the card has no expiry yet."""
    if value is None:
        return "N/A"
    return f"{value.month:02d}/{str(value.year)[-2:]}"


def format_relative_date(value: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    diff = now - value
    hours = int(diff.total_seconds() // 3600)
    days = diff.days

    if hours < 1:
        return "Just now"
    if hours < 24:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return value.strftime("%d/%m/%Y")
