"""
Seed data for the stock catalog and the explicit seed-date migration.

Seeded history uses ISO dates (YYYY-MM-DD) while the trading engine joins on
M/D/YYYY. The two formats never match until migrate_historical_dates() is run.
"""

import random
import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ...utils.config import Config
from .pricing import format_price

ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')


def generate_historical_data(base_price: float, min_price: float, max_price: float,
                             days: int = Config.SEED_HISTORY_DAYS,
                             today: Optional[date] = None,
                             rng: Optional[random.Random] = None) -> List[Dict[str, str]]:
    """Daily opens from today-days through today, within [min_price, max_price]"""
    rng = rng or random
    today = today or date.today()
    data = []

    for offset in range(days, -1, -1):
        day = today - timedelta(days=offset)
        price = base_price * (0.8 + rng.random() * 0.4)
        price = max(min_price, min(max_price, price))
        data.append({
            'date': day.isoformat(),
            'open': format_price(Decimal(repr(price))),
        })

    return data


def build_seed_document(today: Optional[date] = None,
                        rng: Optional[random.Random] = None) -> Dict[str, Dict[str, Any]]:
    """Catalog document keyed by symbol, built from Config.SEED_STOCKS"""
    document = {}
    for symbol, info in Config.SEED_STOCKS.items():
        base, low, high = info['band']
        document[symbol] = {
            'symbol': symbol,
            'companyName': info['name'],
            'isActive': info['active'],
            'currentPrice': info['price'],
            'historicalData': generate_historical_data(base, low, high, today=today, rng=rng),
        }
    return document


def to_trade_date(value: str) -> str:
    """'2023-01-02' -> '1/2/2023'; anything else is returned unchanged"""
    match = ISO_DATE_RE.match(value)
    if not match:
        return value
    year, month, day = (int(part) for part in match.groups())
    return f"{month}/{day}/{year:04d}"


def migrate_historical_dates(document: Dict[str, Dict[str, Any]]) -> int:
    """Rewrite ISO history dates in place; returns the number of entries changed"""
    migrated = 0
    for record in document.values():
        for entry in record.get('historicalData') or []:
            converted = to_trade_date(entry.get('date', ''))
            if converted != entry.get('date'):
                entry['date'] = converted
                migrated += 1
    return migrated
