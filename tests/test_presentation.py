import pytest

from agrosage.models.schemas import PriceForecastingOutput, RiskEntry, SuitabilityEntry
from agrosage.services.presentation import (
    pivot_suitability, price_forecast_chart, risk_band, sort_risk, suitability_band,
)


@pytest.mark.parametrize("score, band", [(95, "good"), (81, "good"), (80, "fair"), (61, "fair"), (60, "poor"), (41, "poor"), (40, "bad"), (0, "bad")])
def test_suitability_band(score, band):
    assert suitability_band(score) == band


@pytest.mark.parametrize("score, band", [(10, "severe"), (8.5, "severe"), (8, "high"), (6.5, "high"), (6, "moderate"), (4.5, "moderate"), (4, "low"), (1, "low")])
def test_risk_band(score, band):
    assert risk_band(score) == band


def test_pivot_keeps_first_seen_order():
    grid = pivot_suitability([
        SuitabilityEntry(district="Delhi", crop="Rice", suitability_score=50, remark="ok"),
        SuitabilityEntry(district="Pune", crop="Cotton", suitability_score=90, remark="black soil"),
        SuitabilityEntry(district="Delhi", crop="Cotton", suitability_score=30, remark="too cold"),
    ])
    assert grid.districts == ["Delhi", "Pune"]
    assert grid.crops == ["Rice", "Cotton"]
    assert grid.grid["Pune"]["Cotton"].band == "good"
    assert grid.grid["Pune"]["Rice"].remark == "N/A"


def test_sort_risk_descending():
    entries = [
        RiskEntry(crop=c, disease_risk=1, supply_chain_risk=1, market_volatility=1, overall_risk=r)
        for c, r in (("A", 2), ("B", 9), ("C", 5))
    ]
    assert [e.crop for e in sort_risk(entries)] == ["B", "C", "A"]


def test_price_forecast_chart_labels():
    points = price_forecast_chart(PriceForecastingOutput(prices=[10, 11], unit="₹/kg", trend="stable"))
    assert [(p.day, p.price) for p in points] == [("Day 1", 10), ("Day 2", 11)]
