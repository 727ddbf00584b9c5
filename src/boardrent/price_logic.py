import logging
import os
from typing import Optional

from dotenv import load_dotenv

from .models import DAY_COLUMN, MONTH_COLUMNS, Billboard, PriceQuote
from .money import coerce_amount, round_money
from .pricing_table import PricingTable, canonical_level, static_monthly_price
from .sizes import canonical_size

load_dotenv()

logger = logging.getLogger(__name__)

# Days used to derive a daily rate from the one-month column
DAYS_PER_MONTH = int(os.getenv('DAYS_PER_MONTH', '30'))

PRICING_MODES = ('months', 'days')

SOURCE_DATABASE = 'DATABASE'
SOURCE_DATABASE_FLIPPED = 'DATABASE_FLIPPED'
SOURCE_STATIC_DEFAULT = 'STATIC_DEFAULT'
SOURCE_DERIVED_DAILY = 'DERIVED_DAILY'
SOURCE_BILLBOARD_PRICE = 'BILLBOARD_PRICE'
SOURCE_NO_DATA = 'NO_DATA'

_MATCH_SOURCES = {'exact': SOURCE_DATABASE, 'flipped': SOURCE_DATABASE_FLIPPED}


def whole_units(value: object) -> int:
    """Durations are whole months or days; invalid input counts as zero."""
    return int(coerce_amount(value))


def _table_match(table: Optional[PricingTable], size, level, category):
    """Match on the keys as given, then on their catalogue spellings."""
    if table is None or len(table) == 0:
        return None, None
    entry, how = table.find_match(size, level, category)
    if entry is not None:
        return entry, how

    canon_size = canonical_size(size)
    canon_level = canonical_level(level)
    if (canon_size, canon_level) == (str(size or '').strip(), str(level or '').strip()):
        return None, None
    logger.debug('Retrying pricing lookup as size=%s level=%s', canon_size, canon_level)
    return table.find_match(canon_size, canon_level, category)


def monthly_price(
    table: Optional[PricingTable],
    size: str,
    level: object,
    category: str,
    months: object,
) -> PriceQuote:
    """
    Resolve the rental price of one billboard for ``months``.

    Fallback chain: table row (exact, then flipped orientation, then again
    under the catalogue size and level spellings) with a value in the
    duration column -> static catalogue -> ``NO_DATA``.  Durations
    without a dedicated column (e.g. 4 months) never read the table.
    """

    months = whole_units(months)
    if months <= 0:
        return PriceQuote(0.0, SOURCE_NO_DATA, notes='no duration')

    column = MONTH_COLUMNS.get(months)
    entry, how = _table_match(table, size, level, category)
    if entry is not None and column is not None:
        value = entry.price_for_column(column)
        if value is not None:
            return PriceQuote(float(value), _MATCH_SOURCES[how], column, notes=f'row {entry.size}')
        logger.debug('Pricing row %s has no %s value', entry.size, column)

    static = static_monthly_price(size, level, category, months)
    if static is not None:
        return PriceQuote(static, SOURCE_STATIC_DEFAULT, column)

    logger.debug('No price for size=%s level=%s category=%s months=%s', size, level, category, months)
    return PriceQuote(0.0, SOURCE_NO_DATA, column)


def daily_price(
    table: Optional[PricingTable],
    size: str,
    level: object,
    category: str,
) -> PriceQuote:
    """
    Resolve the per-day rate of one billboard.

    Uses the ``one_day`` column when the matched row carries it, otherwise
    derives ``monthly / DAYS_PER_MONTH`` (2 dp) from whatever the one-month
    chain resolves.  No monthly price means a zero daily rate.
    """

    entry, how = _table_match(table, size, level, category)
    if entry is not None and entry.one_day is not None:
        return PriceQuote(float(entry.one_day), _MATCH_SOURCES[how], DAY_COLUMN, notes=f'row {entry.size}')

    monthly = monthly_price(table, size, level, category, 1)
    if monthly.price > 0:
        derived = round_money(monthly.price / DAYS_PER_MONTH)
        return PriceQuote(derived, SOURCE_DERIVED_DAILY, DAY_COLUMN, notes=f'one_month/{DAYS_PER_MONTH} via {monthly.source}')

    return PriceQuote(0.0, SOURCE_NO_DATA, DAY_COLUMN)


def rental_price(
    table: Optional[PricingTable],
    billboard: Billboard,
    category: str,
    pricing_mode: str,
    months: object = 0,
    days: object = 0,
) -> PriceQuote:
    """Base-currency rental of ``billboard`` for the whole contract duration."""

    if pricing_mode == 'days':
        days = whole_units(days)
        if days <= 0:
            return PriceQuote(0.0, SOURCE_NO_DATA, notes='no duration')
        daily = daily_price(table, billboard.size, billboard.level, category)
        return PriceQuote(daily.price * days, daily.source, daily.column, notes=daily.notes)

    months = whole_units(months)
    if months <= 0:
        return PriceQuote(0.0, SOURCE_NO_DATA, notes='no duration')
    quote = monthly_price(table, billboard.size, billboard.level, category, months)
    if quote.source == SOURCE_NO_DATA:
        fallback = coerce_amount(billboard.monthly_price)
        return PriceQuote(fallback * months, SOURCE_BILLBOARD_PRICE, quote.column, notes='billboard list price')
    return quote


__all__ = [
    'DAYS_PER_MONTH',
    'PRICING_MODES',
    'SOURCE_BILLBOARD_PRICE',
    'SOURCE_DATABASE',
    'SOURCE_DATABASE_FLIPPED',
    'SOURCE_DERIVED_DAILY',
    'SOURCE_NO_DATA',
    'SOURCE_STATIC_DEFAULT',
    'daily_price',
    'monthly_price',
    'rental_price',
    'whole_units',
]
