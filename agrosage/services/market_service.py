"""
AgroSage — Market Data Service
────────────────────────────────
Synthetic mandi prices and volumes that drive the agent dashboard charts.
Nothing here is persisted: every call draws a fresh random walk, and the
browser re-polls to simulate a live board.

Price model:
    price[0]   = base × (1 ± jitter)
    price[i+1] = price[i] × (1 + δ),   δ = (u − 0.45) × 0.1  ∈ [−4.5%, +5.5%)
"""

import logging
import random
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

import pandas as pd

from agrosage.models.schemas import (
    MandiData, MarketSnapshot, PricePoint, PriceTrend, ProfitOpportunity,
    SupplyChainData, SupplyChainLink, SupplyChainNode, TradeVolume, TrendDirection,
)

logger = logging.getLogger("agrosage.market")

# ─── REFERENCE DATA ──────────────────────────────────────────────────────────

CROPS: List[str] = [
    "Tomato", "Onion", "Wheat", "Potato", "Rice",
    "Sugarcane", "Cotton", "Soybean", "Maize",
]
MANDIS: List[str] = ["Pune", "Nagpur", "Bangalore", "Delhi", "Lucknow"]

# ₹ per quintal
BASE_PRICES: dict[str, int] = {
    "Tomato": 2500, "Onion": 3000, "Wheat": 2200, "Potato": 2000, "Rice": 4000,
    "Sugarcane": 3500, "Cotton": 6000, "Soybean": 4500, "Maize": 1800,
}
# metric tons
BASE_VOLUMES: dict[str, int] = {
    "Tomato": 500, "Onion": 800, "Wheat": 1200, "Potato": 700, "Rice": 1100,
    "Sugarcane": 2000, "Cotton": 900, "Soybean": 600, "Maize": 1000,
}

DELTA_CENTER = 0.45
DELTA_SCALE = 0.1
MIN_DELTA = (0 - DELTA_CENTER) * DELTA_SCALE     # -4.5%
MAX_DELTA = (1 - DELTA_CENTER) * DELTA_SCALE     # +5.5%
MANDI_PRESENCE_PROB = 0.7
HISTORY_DAYS = 7

# Fixed crop/mandi pairs shown on the landing board: (crop, mandi, base price, base volume)
STATIC_MARKETS: List[tuple] = [
    ("Tomato", "Pune", 2500, 500), ("Tomato", "Nagpur", 2300, 300),
    ("Tomato", "Bangalore", 2700, 450), ("Tomato", "Delhi", 2600, 600),
    ("Onion", "Pune", 3000, 800), ("Onion", "Nagpur", 3200, 750),
    ("Onion", "Lucknow", 2900, 650), ("Onion", "Delhi", 3100, 900),
    ("Wheat", "Lucknow", 2200, 1200), ("Wheat", "Pune", 2350, 1000),
    ("Wheat", "Delhi", 2250, 1500),
    ("Potato", "Bangalore", 2000, 700), ("Potato", "Lucknow", 1900, 850),
    ("Potato", "Pune", 2100, 600),
    ("Rice", "Delhi", 4000, 1100), ("Rice", "Nagpur", 4200, 950),
    ("Rice", "Bangalore", 4100, 1000),
]

SUPPLY_CHAIN = SupplyChainData(
    nodes=[SupplyChainNode(name=n) for n in (
        "Pune Mandi", "Nagpur Mandi", "Bangalore Mandi", "Delhi Mandi", "Lucknow Mandi",
        "Mumbai Retail", "Kolkata Retail", "Chennai Retail", "Export",
    )],
    links=[SupplyChainLink(source=s, target=t, value=v) for s, t, v in (
        (0, 5, 400), (0, 7, 200), (0, 8, 150),
        (1, 5, 300), (1, 6, 250),
        (2, 7, 500), (2, 8, 200),
        (3, 6, 600), (3, 5, 300),
        (4, 6, 400), (4, 5, 200),
    )],
)


# ─── GENERATORS ──────────────────────────────────────────────────────────────

def generate_price_history(
    base_price: float,
    days: int,
    rng: Optional[random.Random] = None,
    jitter: float = 0.0,
    end: Optional[date] = None,
) -> List[PricePoint]:
    """
    Random-walk price series of exactly `days` points ending on `end` (today by default).
    `jitter` widens the starting price to base × (1 ± jitter).
    """
    if days < 0:
        raise ValueError("days must be non-negative")
    rng = rng or random
    end = end or date.today()

    price = base_price * (1 + (rng.random() - 0.5) * 2 * jitter)
    history: List[PricePoint] = []
    for i in range(days - 1, -1, -1):
        history.append(PricePoint(
            date=(end - timedelta(days=i)).isoformat(),
            price=round(price),
        ))
        change = (rng.random() - DELTA_CENTER) * DELTA_SCALE
        price *= 1 + change
    return history


def generate_volume(base_volume: float, rng: Optional[random.Random] = None, spread: float = 0.2) -> int:
    """base ± spread/2 (spread=0.2 → ±10%)."""
    rng = rng or random
    return round(base_volume + (rng.random() - 0.5) * base_volume * spread)


def generate_market_data(rng: Optional[random.Random] = None, days: int = HISTORY_DAYS) -> List[MandiData]:
    """Every crop × mandi pair, each present with probability 0.7."""
    rng = rng or random
    rows: List[MandiData] = []
    for crop in CROPS:
        for mandi in MANDIS:
            if rng.random() > 1 - MANDI_PRESENCE_PROB:
                rows.append(MandiData(
                    crop=crop,
                    mandi=mandi,
                    price_history=generate_price_history(BASE_PRICES[crop], days, rng, jitter=0.1),
                    volume=generate_volume(BASE_VOLUMES[crop], rng, spread=0.3),
                ))
    return rows


def static_market_data(rng: Optional[random.Random] = None, days: int = HISTORY_DAYS) -> List[MandiData]:
    rng = rng or random
    return [
        MandiData(
            crop=crop,
            mandi=mandi,
            price_history=generate_price_history(price, days, rng),
            volume=generate_volume(volume, rng),
        )
        for crop, mandi, price, volume in STATIC_MARKETS
    ]


# ─── ANALYTICS ───────────────────────────────────────────────────────────────

def available_crops(rows: List[MandiData]) -> List[str]:
    present = {r.crop for r in rows}
    return [c for c in CROPS if c in present] + sorted(present - set(CROPS))


def resolve_crop(rows: List[MandiData], crop: Optional[str]) -> Optional[str]:
    """Keep `crop` if it has data, else fall back to the first crop that does."""
    crops = available_crops(rows)
    if crop:
        for c in crops:
            if c.lower() == crop.lower():
                return c
    return crops[0] if crops else None


def find_profit_opportunity(rows: List[MandiData], crop: str) -> Optional[ProfitOpportunity]:
    """Buy at the cheapest latest price, sell at the dearest. Needs two distinct mandis."""
    crop_rows = [r for r in rows if r.crop == crop and r.price_history]
    if len(crop_rows) < 2:
        return None

    buy = min(crop_rows, key=lambda r: r.latest_price)
    sell = max(crop_rows, key=lambda r: r.latest_price)
    if buy.mandi == sell.mandi:
        return None

    return ProfitOpportunity(
        crop=crop,
        buy_mandi=buy.mandi,
        buy_price=buy.latest_price,
        sell_mandi=sell.mandi,
        sell_price=sell.latest_price,
        spread=float(sell.latest_price - buy.latest_price),
    )


def _history_frame(rows: List[MandiData]) -> pd.DataFrame:
    records = [
        {"crop": r.crop, "mandi": r.mandi, "date": p.date, "price": p.price}
        for r in rows for p in r.price_history
    ]
    return pd.DataFrame.from_records(records, columns=["crop", "mandi", "date", "price"])


def price_chart(rows: List[MandiData], crop: str) -> List[dict]:
    """One record per date with a price column per mandi, e.g. {"date": ..., "Pune": 2510}."""
    df = _history_frame([r for r in rows if r.crop == crop])
    if df.empty:
        return []
    wide = (
        df.pivot_table(index="date", columns="mandi", values="price", aggfunc="last")
        .sort_index()
        .reset_index()
    )
    wide.columns.name = None
    records = wide.to_dict(orient="records")
    # NaN → None so the JSON stays valid when a mandi is missing a day
    return [{k: (None if pd.isna(v) else (int(v) if k != "date" else v)) for k, v in rec.items()} for rec in records]


def trade_volume(rows: List[MandiData]) -> List[TradeVolume]:
    """Total traded volume per crop; every known crop is listed even with zero volume."""
    df = pd.DataFrame([{"crop": r.crop, "volume": r.volume} for r in rows], columns=["crop", "volume"])
    totals = df.groupby("crop")["volume"].sum() if not df.empty else pd.Series(dtype="int64")
    crops = CROPS + sorted(set(totals.index) - set(CROPS))
    return [TradeVolume(crop=c, volume=int(totals.get(c, 0))) for c in crops]


def price_trend(row: MandiData) -> PriceTrend:
    history = row.price_history
    if len(history) < 2:
        return PriceTrend(mandi=row.mandi, direction=TrendDirection.FLAT, change_pct=0.0)
    latest, previous = history[-1].price, history[-2].price
    change_pct = round((latest - previous) / previous * 100, 2) if previous else 0.0
    if latest > previous:
        direction = TrendDirection.UP
    elif latest < previous:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.FLAT
    return PriceTrend(mandi=row.mandi, direction=direction, change_pct=change_pct)


def build_snapshot(
    crop: Optional[str] = None,
    rng: Optional[random.Random] = None,
    rows: Optional[List[MandiData]] = None,
) -> MarketSnapshot:
    """Everything the Market Analytics view draws for one refresh tick."""
    rows = rows if rows is not None else generate_market_data(rng)
    selected = resolve_crop(rows, crop)
    if selected is None:
        raise ValueError("No market data was generated for any crop.")
    if crop and selected.lower() != crop.lower():
        logger.info("No mandi data for %s this tick, showing %s", crop, selected)

    crop_rows = [r for r in rows if r.crop == selected]
    return MarketSnapshot(
        crops=available_crops(rows),
        selected_crop=selected,
        rows=crop_rows,
        chart=price_chart(rows, selected),
        trends=[price_trend(r) for r in crop_rows],
        trade_volume=trade_volume(rows),
        profit_opportunity=find_profit_opportunity(rows, selected),
        generated_at=datetime.now(timezone.utc).isoformat(),
    )
