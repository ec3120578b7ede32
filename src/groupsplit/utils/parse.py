from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from groupsplit.services.errors import ValidationError

MAX_AMOUNT = Decimal("10") ** 10

_AMOUNT_RE = re.compile(r"^[+]?\d+(?:[.,]\d+)?$")
_CODE_RE = re.compile(r"^[a-z0-9]{5,32}$")


def parse_amount(value: str | int | Decimal) -> Decimal:
    """
    Parse a money amount typed by a user or passed programmatically.

    Accepts "12", "12.5", "12,50" and Decimal/int values. The result is
    positive, finite, below ``MAX_AMOUNT`` and has at most two fractional
    digits.
    """
    if isinstance(value, bool):
        raise ValidationError("Amount must be a number.")
    if isinstance(value, (int, Decimal)):
        amount = Decimal(value)
    else:
        text = value.strip().replace(" ", "")
        if not _AMOUNT_RE.match(text):
            raise ValidationError(f"{value!r} is not a valid amount.")
        try:
            amount = Decimal(text.replace(",", "."))
        except InvalidOperation as exc:
            raise ValidationError(f"{value!r} is not a valid amount.") from exc

    if not amount.is_finite():
        raise ValidationError("Amount must be a finite number.")
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero.")
    if amount >= MAX_AMOUNT:
        raise ValidationError("Amount is too large.")
    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError("Amount can have at most two decimal places.")
    return amount.quantize(Decimal("0.01"))


def split_args(text: str | None, command: str) -> list[str]:
    """Strip the leading /command (and an optional @botname) and split on "|"."""
    if not text:
        return []
    body = re.sub(rf"^/{re.escape(command)}(@\w+)?", "", text.strip(), count=1).strip()
    if not body:
        return []
    return [part.strip() for part in body.split("|")]


def parse_names(text: str) -> list[str]:
    """Names separated by commas, "all" is kept as a literal marker."""
    return [name.strip() for name in text.split(",") if name.strip()]


def normalize_code(value: str) -> str | None:
    code = value.strip().lower()
    if code.startswith("group_"):
        code = code[len("group_"):]
    return code if _CODE_RE.match(code) else None
