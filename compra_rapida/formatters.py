"""Formatting and parsing helpers for Brazilian display conventions.

Stored values are canonical (digits-only CPF and phone, ``Decimal`` amounts,
ISO dates); the functions here build the display form on demand and turn
typed text back into canonical values. None of them raise on malformed text.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from compra_rapida.exceptions import ConfigurationError

_NON_DIGITS = re.compile(r"\D")
CENTS = Decimal("0.01")
# Largest amount a NUMERIC(12, 2) column holds.
MAX_AMOUNT = Decimal("9999999999.99")


@dataclass(frozen=True)
class LocaleFormat:
    """Currency and date conventions for one locale."""

    currency_symbol: str
    symbol_separator: str
    thousands_separator: str
    decimal_separator: str
    date_format: str


LOCALES: dict[str, LocaleFormat] = {
    "pt_BR": LocaleFormat(
        currency_symbol="R$",
        symbol_separator=" ",
        thousands_separator=".",
        decimal_separator=",",
        date_format="%d/%m/%Y",
    ),
    "en_US": LocaleFormat(
        currency_symbol="$",
        symbol_separator="",
        thousands_separator=",",
        decimal_separator=".",
        date_format="%m/%d/%Y",
    ),
}


def get_locale(locale: str) -> LocaleFormat:
    """Return the conventions for ``locale``."""
    try:
        return LOCALES[locale]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported locale {locale!r}; expected one of {sorted(LOCALES)}"
        ) from None


def only_digits(text: str | None) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", text or "")


def name_sort_key(name: str) -> str:
    """Accent- and case-insensitive key, so ``"Álvaro"`` sorts before ``"Bruno"``."""
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def format_cpf(text: str | None) -> str:
    """Format a CPF as ``###.###.###-##``.

    Partial input is grouped progressively so it can back a live-typing
    mask; digits beyond the eleventh are dropped.
    """
    digits = only_digits(text)[:11]
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"{digits[:3]}.{digits[3:]}"
    if len(digits) <= 9:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:]}"
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_phone(text: str | None) -> str:
    """Format a phone number as ``(##) #####-####`` or ``(##) ####-####``."""
    digits = only_digits(text)[:11]
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if not digits:
        return ""
    if len(digits) <= 2:
        return f"({digits}"
    if len(digits) <= 6:
        return f"({digits[:2]}) {digits[2:]}"
    return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"


def format_currency(value: Decimal | int | float, locale: str = "pt_BR") -> str:
    """Render an amount as currency, e.g. ``R$ 1.234,56``."""
    conventions = get_locale(locale)
    amount = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    separators = str.maketrans(
        {",": conventions.thousands_separator, ".": conventions.decimal_separator}
    )
    number = f"{abs(amount):,.2f}".translate(separators)
    return f"{sign}{conventions.currency_symbol}{conventions.symbol_separator}{number}"


def has_misplaced_grouping(text: str | None, locale: str = "pt_BR") -> bool:
    """Tell whether a thousands separator in ``text`` is not followed by three digits.

    ``"100.50"`` under pt_BR is the typical case: the dot was meant as a
    decimal point, and ``parse_currency`` alone would read it as 10050.
    """
    conventions = get_locale(locale)
    integer_part = (text or "").partition(conventions.decimal_separator)[0]
    separator = re.escape(conventions.thousands_separator)
    return re.search(rf"{separator}(?!\d{{3}}(?!\d))", integer_part) is not None


def parse_currency(text: str | None, locale: str = "pt_BR") -> Decimal:
    """Parse typed currency text into a ``Decimal``.

    Everything except digits and the decimal separator is dropped. Returns
    ``Decimal("0")`` when no valid number remains; callers reject zero
    through amount validation.
    """
    conventions = get_locale(locale)
    kept = re.sub(rf"[^\d{re.escape(conventions.decimal_separator)}]", "", text or "")
    normalized = kept.replace(conventions.decimal_separator, ".")
    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def format_date(value: date | datetime, locale: str = "pt_BR") -> str:
    """Render a short date, e.g. ``31/12/2024``."""
    return value.strftime(get_locale(locale).date_format)
