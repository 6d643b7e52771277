"""
Multi-currency helpers.

Prices are stored in the base currency (EUR) and converted for display using
CurrencyExchange rows, with fixed fallback rates when no row exists.
"""
import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from django.conf import settings

from .models import Currency, CurrencyExchange

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')

FALLBACK_RATES = {
    ('EUR', 'PLN'): Decimal('4.5'),
    ('EUR', 'UAH'): Decimal('40'),
}

CURRENCY_SYMBOLS = {
    'EUR': '€',
    'PLN': 'zł',
    'UAH': '₴',
}


def base_currency() -> str:
    return getattr(settings, 'BASE_CURRENCY', Currency.EUR)


def normalize_currency(code: Optional[str]) -> str:
    """Uppercase a currency code and make sure it is supported."""
    normalized = (code or '').strip().upper()
    if normalized not in Currency.values:
        raise ValueError(f"Unsupported currency: {code}")
    return normalized


def detect_currency_from_locale(locale: Optional[str]) -> str:
    """
    Map a storefront locale to its display currency.

    pl -> PLN, ua/uk -> UAH, everything else (including no locale) -> EUR.
    """
    if not locale:
        return Currency.EUR

    normalized = locale.lower()
    if 'pl' in normalized:
        return Currency.PLN
    if 'ua' in normalized or 'uk' in normalized:
        return Currency.UAH
    return Currency.EUR


def get_exchange_rate(from_currency: str, to_currency: str) -> Decimal:
    """
    Rate to multiply an amount in from_currency by to get to_currency.

    Looks for a stored rate first, then for the inverse pair, then falls back
    to the fixed rates from the base currency.
    """
    from_currency = normalize_currency(from_currency)
    to_currency = normalize_currency(to_currency)
    if from_currency == to_currency:
        return Decimal('1')

    direct = CurrencyExchange.objects.filter(
        from_currency=from_currency, to_currency=to_currency
    ).values_list('rate', flat=True).first()
    if direct:
        return direct

    inverse = CurrencyExchange.objects.filter(
        from_currency=to_currency, to_currency=from_currency
    ).values_list('rate', flat=True).first()
    if inverse:
        return Decimal('1') / inverse

    if (from_currency, to_currency) in FALLBACK_RATES:
        logger.info(f"No stored rate for {from_currency}->{to_currency}, using fallback")
        return FALLBACK_RATES[(from_currency, to_currency)]
    if (to_currency, from_currency) in FALLBACK_RATES:
        logger.info(f"No stored rate for {from_currency}->{to_currency}, using inverse fallback")
        return Decimal('1') / FALLBACK_RATES[(to_currency, from_currency)]

    # Cross rate through the base currency, e.g. PLN -> UAH
    base = base_currency()
    return get_exchange_rate(from_currency, base) * get_exchange_rate(base, to_currency)


def convert_price(amount: Union[Decimal, int, float, str], rate: Union[Decimal, int, str]) -> Decimal:
    """Multiply by the rate and round half-up to cents."""
    try:
        converted = Decimal(str(amount)) * Decimal(str(rate))
    except InvalidOperation:
        return Decimal('0.00')
    if not converted.is_finite():
        return Decimal('0.00')
    return converted.quantize(CENT, rounding=ROUND_HALF_UP)


def convert_from_base(amount, to_currency: str) -> Decimal:
    return convert_price(amount, get_exchange_rate(base_currency(), to_currency))


def _group_thousands(integer_part: str, separator: str) -> str:
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    return separator.join(groups)


def format_price(amount, currency: str) -> str:
    """
    Format an amount for display.

    EUR: €1,234.56
    PLN: 1 234,56 zł
    UAH: 1 234,56 ₴
    """
    currency = normalize_currency(currency)
    value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    sign = '-' if value < 0 else ''
    integer_part, fraction = f"{abs(value):.2f}".split('.')

    if currency == Currency.EUR:
        return f"{sign}{CURRENCY_SYMBOLS[currency]}{_group_thousands(integer_part, ',')}.{fraction}"
    return f"{sign}{_group_thousands(integer_part, ' ')},{fraction} {CURRENCY_SYMBOLS[currency]}"


def parse_price_string(value) -> Decimal:
    """
    Best-effort parse of a price shown to a customer ("1 234,56 zł", "€12.50").

    Returns 0 for anything unparseable.
    """
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal('0')
    if isinstance(value, (int, float)):
        try:
            parsed = Decimal(str(value))
        except InvalidOperation:
            return Decimal('0')
        return parsed if parsed.is_finite() else Decimal('0')

    normalized = re.sub(r'[^0-9.,-]', '', str(value))
    if ',' in normalized and '.' in normalized:
        # "1,234.56": comma groups thousands
        normalized = normalized.replace(',', '')
    else:
        normalized = normalized.replace(',', '.')
    try:
        parsed = Decimal(normalized)
    except InvalidOperation:
        return Decimal('0')
    return parsed if parsed.is_finite() else Decimal('0')
