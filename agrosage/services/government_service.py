"""
AgroSage — Government Insights Service
────────────────────────────────────────
Mock policy-level datasets for the government dashboard, plus the text
summaries handed to the policy advisor flow.
"""

import random
from datetime import datetime, timezone
from typing import List, Optional

from agrosage.models.schemas import (
    ComplaintHotspot, DistrictYield, GovernmentOverview, MspCompliance, PolicyAdvisorInput,
)

DISTRICTS = ["Pune", "Nagpur", "Lucknow", "Bangalore", "Delhi", "Nashik", "Indore", "Ludhiana"]
COMPLAINT_CATEGORIES = ["Payment delay", "Low price", "Procurement", "Input quality", "Water"]

# ₹/quintal, kharif/rabi reference levels
MSP_RATES: dict[str, int] = {
    "Wheat": 2275,
    "Rice": 2183,
    "Cotton": 6620,
    "Soybean": 4600,
    "Maize": 2090,
    "Chickpea": 5440,
}


def district_yield_index(rng: Optional[random.Random] = None) -> List[DistrictYield]:
    """Yield index per district (100 = national average), ranked best first."""
    rng = rng or random
    scores = {d: round(rng.uniform(70, 130), 1) for d in DISTRICTS}
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    return [DistrictYield(rank=i + 1, district=d, yield_index=s) for i, (d, s) in enumerate(ranked)]


def msp_compliance(rng: Optional[random.Random] = None) -> List[MspCompliance]:
    """Current mandi price vs. MSP; a crop is compliant when it trades at or above MSP."""
    rng = rng or random
    rows = []
    for crop, msp in MSP_RATES.items():
        market = round(msp * rng.uniform(0.85, 1.15))
        rows.append(MspCompliance(
            crop=crop,
            msp=msp,
            market_price=market,
            gap_pct=round((market - msp) / msp * 100, 1),
            compliant=market >= msp,
        ))
    return rows


def complaint_heatmap(rng: Optional[random.Random] = None) -> List[ComplaintHotspot]:
    rng = rng or random
    hotspots = []
    for district in DISTRICTS:
        complaints = {c: rng.randint(0, 40) for c in COMPLAINT_CATEGORIES}
        hotspots.append(ComplaintHotspot(
            district=district,
            complaints=complaints,
            total=sum(complaints.values()),
            sentiment=round(rng.uniform(-1, 1), 2),
        ))
    return sorted(hotspots, key=lambda h: h.total, reverse=True)


def build_overview(rng: Optional[random.Random] = None) -> GovernmentOverview:
    return GovernmentOverview(
        yield_index=district_yield_index(rng),
        msp_compliance=msp_compliance(rng),
        complaint_heatmap=complaint_heatmap(rng),
        generated_at=datetime.now(timezone.utc).isoformat(),
    )


# ─── SUMMARIES FOR THE POLICY ADVISOR ────────────────────────────────────────

def summarize_yield(rows: List[DistrictYield]) -> str:
    return "; ".join(f"#{r.rank} {r.district} {r.yield_index:.1f}" for r in rows)


def summarize_msp(rows: List[MspCompliance]) -> str:
    parts = []
    for r in rows:
        status = "at/above MSP" if r.compliant else "BELOW MSP"
        parts.append(f"{r.crop}: MSP ₹{r.msp}/qtl, mandi ₹{r.market_price}/qtl ({r.gap_pct:+.1f}%, {status})")
    return "; ".join(parts)


def summarize_complaints(rows: List[ComplaintHotspot]) -> str:
    parts = []
    for r in rows:
        top = max(r.complaints, key=r.complaints.get)
        parts.append(f"{r.district}: {r.total} complaints, mostly '{top}', sentiment {r.sentiment:+.2f}")
    return "; ".join(parts)


def policy_input(overview: GovernmentOverview) -> PolicyAdvisorInput:
    return PolicyAdvisorInput(
        district_wise_yield_index=summarize_yield(overview.yield_index),
        msp_compliance_chart=summarize_msp(overview.msp_compliance),
        complaint_heatmap=summarize_complaints(overview.complaint_heatmap),
    )
