from __future__ import annotations


def format_money(amount: float) -> str:
    if amount < 0:
        return "-" + format_money(-amount)
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.2f}M"
    if amount >= 1000:
        return f"${amount / 1000:.1f}K"
    return f"${int(amount):,}"


def format_money_per_sec(amount: float) -> str:
    if amount >= 0:
        return f"+{format_money(amount)}/s"
    return f"{format_money(amount)}/s"


def format_number(num: float) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return f"{int(num):,}"


def format_duration(seconds: float) -> str:
    """Short human form of an offline gap, e.g. ``2h 5m``."""
    seconds = max(0, int(seconds))
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
