"""
AgroSage — Agent Tools Service
────────────────────────────────
Mock data behind the agent/trader tool pages: commission tracker, smart
contract logs, live alert console, farmer query inbox and buyer-seller map.

Alerts and farmer queries live in process memory only; they reset on restart.
"""

import logging
import random
import threading
from collections import deque
from copy import deepcopy
from datetime import date, datetime, timedelta
from typing import Deque, Dict, List, Optional

import pandas as pd

from agrosage.models.schemas import (
    AlertFeed, AlertItem, Commission, CommissionByCrop, CommissionSummary,
    Farmer, FarmerLocation, FarmerQuery, QueryMessage, SmartContractLog,
)

logger = logging.getLogger("agrosage.agent")

COMMISSION_CROPS = ["Tomato", "Onion", "Wheat", "Potato", "Rice", "Cotton"]
CONTRACT_CROPS = ["Tomato", "Onion", "Wheat", "Potato"]
CONTRACT_FARMERS = ["Ramesh K.", "Sita D.", "Vijay S.", "Anjali M."]
# Weighted 3:1:1
CONTRACT_STATUSES = ["Confirmed", "Confirmed", "Confirmed", "Pending", "Failed"]
FARMER_STATUSES = ("Online", "Offline", "In-Transaction")
# Oldest alerts fall off the console past this many
MAX_ALERTS = 50


class NotFoundError(KeyError):
    """Raised when an alert or query id does not exist."""


# ─── COMMISSION TRACKER ──────────────────────────────────────────────────────

def generate_commissions(rng: Optional[random.Random] = None, count: int = 20, today: Optional[date] = None) -> List[Commission]:
    rng = rng or random
    today = today or date.today()
    deals: List[Commission] = []
    for i in range(count):
        crop = rng.choice(COMMISSION_CROPS)
        volume = rng.randint(10, 109)
        price = rng.randint(2000, 2999)
        rate = rng.uniform(1.5, 5.0)
        deals.append(Commission(
            id=f"deal-{i}",
            crop=crop,
            volume=volume,
            price_per_quintal=price,
            commission_rate=round(rate, 2),
            total_commission=round(volume * price * rate / 100, 2),
            status="Paid" if rng.random() > 0.4 else "Pending",
            date=(today - timedelta(days=i)).strftime("%d/%m/%Y"),
        ))
    return deals


def summarize_commissions(deals: List[Commission]) -> CommissionSummary:
    df = pd.DataFrame([d.model_dump() for d in deals], columns=list(Commission.model_fields))
    if df.empty:
        return CommissionSummary(total_earned=0, total_pending=0, by_crop=[], deals=[])

    totals = df.groupby("status")["total_commission"].sum()
    by_crop = (
        df.pivot_table(index="crop", columns="status", values="total_commission", aggfunc="sum", fill_value=0)
        .reindex(columns=["Paid", "Pending"], fill_value=0)
    )
    # keep first-seen crop order for the chart
    order = list(dict.fromkeys(df["crop"]))
    return CommissionSummary(
        total_earned=round(float(totals.get("Paid", 0)), 2),
        total_pending=round(float(totals.get("Pending", 0)), 2),
        by_crop=[
            CommissionByCrop(
                crop=crop,
                paid=round(float(by_crop.at[crop, "Paid"]), 2),
                pending=round(float(by_crop.at[crop, "Pending"]), 2),
            )
            for crop in order
        ],
        deals=deals,
    )


# ─── SMART CONTRACT LOGS ─────────────────────────────────────────────────────

def generate_contract_logs(rng: Optional[random.Random] = None, count: int = 50, now: Optional[datetime] = None) -> List[SmartContractLog]:
    """Blockchain-style deal log, newest first."""
    rng = rng or random
    now = now or datetime.now()
    logs: List[SmartContractLog] = []
    for _ in range(count):
        volume = rng.randint(10, 209)
        price = rng.randint(1500, 2499)
        ts = now - timedelta(seconds=rng.random() * 60 * 60 * 24 * 30)
        logs.append(SmartContractLog(
            tx_id="0x" + "".join(rng.choice("0123456789abcdef") for _ in range(10)) + "...",
            timestamp=ts.isoformat(timespec="seconds"),
            farmer=rng.choice(CONTRACT_FARMERS),
            agent="Self",
            crop=rng.choice(CONTRACT_CROPS),
            volume=volume,
            price=price,
            total_value=volume * price,
            status=rng.choice(CONTRACT_STATUSES),
        ))
    logs.sort(key=lambda log: log.timestamp, reverse=True)
    return logs


def filter_logs(logs: List[SmartContractLog], status: Optional[str]) -> List[SmartContractLog]:
    if not status or status.lower() == "all":
        return logs
    return [log for log in logs if log.status.lower() == status.lower()]


# ─── ALERT CONSOLE ───────────────────────────────────────────────────────────

def _seed_alerts(now: datetime) -> List[AlertItem]:
    return [
        AlertItem(
            id="alert-1", type="price", title="Price Spike: Tomato in Pune",
            description="Tomato prices have increased by 15% in Pune mandi in the last 2 hours.",
            timestamp=now - timedelta(minutes=5), is_read=False,
        ),
        AlertItem(
            id="alert-2", type="supply", title="New Lot Available: Wheat in Lucknow",
            description="A new lot of 500 quintals of high-grade wheat is now available in Lucknow.",
            timestamp=now - timedelta(minutes=30), is_read=False,
        ),
        AlertItem(
            id="alert-3", type="announcement", title="Market Holiday Next Week",
            description="All mandis will be closed next Friday for a regional festival.",
            timestamp=now - timedelta(hours=2), is_read=True,
        ),
    ]


class AlertConsole:
    def __init__(self, now: Optional[datetime] = None, max_alerts: int = MAX_ALERTS):
        self._lock = threading.Lock()
        self._alerts: Deque[AlertItem] = deque(_seed_alerts(now or datetime.now()), maxlen=max_alerts)
        self._counter = 0

    def feed(self) -> AlertFeed:
        with self._lock:
            alerts = [a.model_copy() for a in self._alerts]
        return AlertFeed(alerts=alerts, unread=sum(not a.is_read for a in alerts))

    def mark_read(self, alert_id: str) -> AlertItem:
        with self._lock:
            for alert in self._alerts:
                if alert.id == alert_id:
                    alert.is_read = True
                    return alert.model_copy()
        raise NotFoundError(alert_id)

    def mark_all_read(self) -> AlertFeed:
        with self._lock:
            for alert in self._alerts:
                alert.is_read = True
        return self.feed()

    def simulate(self, now: Optional[datetime] = None) -> AlertItem:
        """Push the canned 'onion price drop' alert, as the console does on every tick."""
        now = now or datetime.now()
        with self._lock:
            self._counter += 1
            alert = AlertItem(
                id=f"alert-{int(now.timestamp() * 1000)}-{self._counter}",
                type="price",
                title="Price Drop: Onion in Nagpur",
                description="Onion prices have fallen by 8% due to increased supply.",
                timestamp=now,
                is_read=False,
            )
            self._alerts.appendleft(alert)
        logger.info("Simulated alert %s", alert.id)
        return alert.model_copy()


# ─── FARMER QUERY INBOX ──────────────────────────────────────────────────────

FARMERS: Dict[str, Farmer] = {
    f.id: f for f in (
        Farmer(id="f1", name="Ramesh Kumar", avatar="https://i.pravatar.cc/150?u=ramesh", fallback="RK"),
        Farmer(id="f2", name="Sita Devi", avatar="https://i.pravatar.cc/150?u=sita", fallback="SD"),
        Farmer(id="f3", name="Vijay Singh", avatar="https://i.pravatar.cc/150?u=vijay", fallback="VS"),
    )
}

_SEED_QUERIES: List[FarmerQuery] = [
    FarmerQuery(
        id="q1", farmer=FARMERS["f1"], subject="Tomato leaf curl issue", topic="disease", is_read=False,
        messages=[QueryMessage(sender="farmer", text="My tomato plants have yellow, curled leaves. What should I do?", timestamp="10:30 AM")],
    ),
    FarmerQuery(
        id="q2", farmer=FARMERS["f2"], subject="Best price for wheat?", topic="market", is_read=True,
        messages=[
            QueryMessage(sender="farmer", text="What is the current forecast for wheat prices in Lucknow mandi?", timestamp="Yesterday"),
            QueryMessage(sender="agent", text="Hi Sita, prices are expected to rise by 5-7% over the next week. Holding for a few more days could be profitable.", timestamp="Yesterday"),
            QueryMessage(sender="farmer", text="Thank you for the advice!", timestamp="9:00 AM"),
        ],
    ),
    FarmerQuery(
        id="q3", farmer=FARMERS["f3"], subject="Potato blight signs", topic="disease", is_read=True,
        messages=[QueryMessage(sender="farmer", text="I see some dark spots on my potato leaves. Is this blight?", timestamp="2 days ago")],
    ),
]


class QueryDesk:
    def __init__(self):
        self._lock = threading.Lock()
        self._queries: List[FarmerQuery] = deepcopy(_SEED_QUERIES)

    def list(self) -> List[FarmerQuery]:
        with self._lock:
            return [q.model_copy(deep=True) for q in self._queries]

    def _find(self, query_id: str) -> FarmerQuery:
        for q in self._queries:
            if q.id == query_id:
                return q
        raise NotFoundError(query_id)

    def open(self, query_id: str) -> FarmerQuery:
        """Selecting a query marks it read."""
        with self._lock:
            query = self._find(query_id)
            query.is_read = True
            return query.model_copy(deep=True)

    def reply(self, query_id: str, text: str, now: Optional[datetime] = None) -> FarmerQuery:
        if not text.strip():
            raise ValueError("Reply cannot be empty.")
        now = now or datetime.now()
        with self._lock:
            query = self._find(query_id)
            query.messages.append(QueryMessage(sender="agent", text=text.strip(), timestamp=now.strftime("%H:%M")))
            return query.model_copy(deep=True)


# ─── BUYER-SELLER GEOMAP ─────────────────────────────────────────────────────

FARMER_LOCATIONS: List[FarmerLocation] = [
    FarmerLocation(id="f1", name="Ramesh Kumar", avatar="https://i.pravatar.cc/150?u=ramesh", fallback="RK", location="Pune, MH", status="Online", last_seen="Active now"),
    FarmerLocation(id="f2", name="Sita Devi", avatar="https://i.pravatar.cc/150?u=sita", fallback="SD", location="Lucknow, UP", status="In-Transaction", last_seen="Active now"),
    FarmerLocation(id="f3", name="Vijay Singh", avatar="https://i.pravatar.cc/150?u=vijay", fallback="VS", location="Nagpur, MH", status="Online", last_seen="Active now"),
    FarmerLocation(id="f4", name="Anjali Mishra", avatar="https://i.pravatar.cc/150?u=anjali", fallback="AM", location="Bangalore, KA", status="Offline", last_seen="5 hours ago"),
    FarmerLocation(id="f5", name="Suresh Patil", avatar="https://i.pravatar.cc/150?u=suresh", fallback="SP", location="Pune, MH", status="Online", last_seen="Active now"),
    FarmerLocation(id="f6", name="Meena Kumari", avatar="https://i.pravatar.cc/150?u=meena", fallback="MK", location="Delhi", status="Offline", last_seen="2 days ago"),
]


def connected_farmers(status: Optional[str] = None) -> List[FarmerLocation]:
    if not status or status.lower() == "all":
        return list(FARMER_LOCATIONS)
    return [f for f in FARMER_LOCATIONS if f.status.lower() == status.lower()]


# Process-wide state for the live console and inbox
alert_console = AlertConsole()
query_desk = QueryDesk()
