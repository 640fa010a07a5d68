"""Fixed-point amount codec and display helpers.

Token amounts are integers scaled by 10**6. ``parse_amount`` is exact;
``format_amount`` is a lossy, display-only rendering rounded to cents and must
never be parsed back as an exact amount.
"""

import re
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from crowdfund.services.errors import InvalidAmount

DECIMALS = 6
SCALE = 10**DECIMALS

_AMOUNT_RE = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?")
_CENT = Decimal("0.01")


def parse_amount(text: str) -> int:
    """Parse a non-negative decimal string into fixed-point units.

    >>> parse_amount("12.345678")
    12345678
    """
    if not isinstance(text, str):
        raise InvalidAmount(f"Amount must be text, got {type(text).__name__}")
    raw: str = text.strip()
    match: re.Match[str] | None = _AMOUNT_RE.fullmatch(raw)
    if match is None:
        raise InvalidAmount(f"'{text}' is not a non-negative decimal number")
    whole: str = match.group("whole")
    frac: str = match.group("frac") or ""
    if not whole and not frac:
        raise InvalidAmount(f"'{text}' is not a non-negative decimal number")
    if len(frac) > DECIMALS:
        raise InvalidAmount(f"'{text}' has more than {DECIMALS} fractional digits")
    return int(whole or "0") * SCALE + int(frac.ljust(DECIMALS, "0"))


def parse_positive_amount(text: str) -> int:
    amount: int = parse_amount(text)
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than zero")
    return amount


def format_amount(amount: int, grouping: bool = True) -> str:
    """Render fixed-point units with exactly two decimals (half-up)."""
    value: Decimal = Decimal(amount).scaleb(-DECIMALS).quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{value:,.2f}" if grouping else f"{value:.2f}"


def format_bps(fee_bps: int) -> str:
    """250 -> '2.5%'."""
    whole, rest = divmod(fee_bps, 100)
    if not rest:
        return f"{whole}%"
    return f"{whole}.{rest:02d}".rstrip("0") + "%"


def format_deadline(timestamp: int) -> str:
    moment: datetime = datetime.fromtimestamp(timestamp, tz=UTC)
    return f"{moment:%b} {moment.day}, {moment.year}"


def short_address(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"
