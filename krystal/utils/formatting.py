"""Display helpers for money, percentages, addresses and timestamps."""
from __future__ import annotations

import time
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


# Finance

def format_usd(amount: float) -> str:
    """Abbreviate with K/M/B above a thousand; keep four decimals below $1."""
    if amount >= 1_000_000_000:
        return f"${amount / 1_000_000_000:.1f}B"
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.1f}M"
    if amount >= 1_000:
        return f"${amount / 1_000:.1f}K"
    if amount >= 1:
        return f"${amount:.2f}"
    return f"${amount:.4f}"


def format_usd_compact(amount: float) -> str:
    if amount >= 1_000_000_000:
        return f"{amount / 1_000_000_000:.1f}B"
    if amount >= 1_000_000:
        return f"{amount / 1_000_000:.1f}M"
    if amount >= 1_000:
        return f"{amount / 1_000:.1f}K"
    if amount >= 1:
        return f"{amount:.0f}"
    return f"{amount:.2f}"


def format_percentage(percentage: float) -> str:
    if float(percentage).is_integer() or abs(percentage) >= 100:
        return f"{percentage:.0f}%"
    if abs(percentage) >= 10:
        return f"{percentage:.1f}%"
    return f"{percentage:.2f}%"


def percentage_change(old_value: float, new_value: float) -> Optional[float]:
    if old_value == 0:
        return None
    return (new_value - old_value) / old_value * 100.0


def is_high_value(value: float, threshold: float) -> bool:
    return value >= threshold


def calculate_cagr(initial_value: float, final_value: float, years: float) -> Optional[float]:
    """Compound annual growth rate in percent, or None for non-positive inputs."""
    if initial_value <= 0 or final_value <= 0 or years <= 0:
        return None
    return ((final_value / initial_value) ** (1.0 / years) - 1.0) * 100.0


# Addresses

def is_valid_ethereum_address(address: str) -> bool:
    return (
        len(address) == 42
        and address.startswith("0x")
        and all(c in "0123456789abcdefABCDEF" for c in address[2:])
    )


def normalize_address(address: str) -> str:
    return address.lower() if is_valid_ethereum_address(address) else address


def format_address(address: str, prefix_len: int = 6, suffix_len: int = 4) -> str:
    if len(address) <= prefix_len + suffix_len + 3:
        return address
    return f"{address[:prefix_len]}...{address[len(address) - suffix_len:]}"


def format_address_default(address: str) -> str:
    return format_address(address, 6, 4)


# Time

def current_timestamp() -> int:
    return int(time.time())


def days_ago(days: int) -> int:
    return max(0, current_timestamp() - days * SECONDS_PER_DAY)


def hours_ago(hours: int) -> int:
    return max(0, current_timestamp() - hours * 3600)


def minutes_ago(minutes: int) -> int:
    return max(0, current_timestamp() - minutes * 60)


def start_of_day_ago(days: int) -> int:
    """Midnight UTC of the day ``days`` ago."""
    ts = days_ago(days)
    return ts - ts % SECONDS_PER_DAY


def format_timestamp(timestamp: int, now: Optional[int] = None) -> str:
    now = current_timestamp() if now is None else now
    seconds = max(0, now - timestamp)
    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < SECONDS_PER_DAY:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // SECONDS_PER_DAY} days ago"
