import random

from agrosage.services.government_service import (
    DISTRICTS, MSP_RATES, build_overview, complaint_heatmap, district_yield_index,
    msp_compliance, policy_input,
)


def test_yield_index_is_ranked():
    rows = district_yield_index(random.Random(3))
    assert [r.rank for r in rows] == list(range(1, len(DISTRICTS) + 1))
    scores = [r.yield_index for r in rows]
    assert scores == sorted(scores, reverse=True)
    assert all(70 <= s <= 130 for s in scores)


def test_msp_compliance_flag_matches_gap():
    rows = msp_compliance(random.Random(8))
    assert {r.crop for r in rows} == set(MSP_RATES)
    for r in rows:
        assert r.compliant == (r.market_price >= r.msp)
        assert (r.gap_pct >= 0) == r.compliant or r.gap_pct == 0


def test_complaints_sorted_by_total():
    rows = complaint_heatmap(random.Random(5))
    totals = [r.total for r in rows]
    assert totals == sorted(totals, reverse=True)
    assert all(r.total == sum(r.complaints.values()) for r in rows)


def test_policy_input_summarises_overview():
    overview = build_overview(random.Random(12))
    summary = policy_input(overview)
    top = overview.yield_index[0]
    assert summary.district_wise_yield_index.startswith(f"#1 {top.district}")
    assert all(crop in summary.msp_compliance_chart for crop in MSP_RATES)
    assert overview.complaint_heatmap[0].district in summary.complaint_heatmap


def test_overview_endpoint(client):
    data = client.get("/api/government/overview").json()
    assert len(data["yield_index"]) == len(DISTRICTS)
    assert len(data["msp_compliance"]) == len(MSP_RATES)
