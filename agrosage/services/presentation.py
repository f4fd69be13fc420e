"""
Reshapes validated flow outputs into what the dashboard tables and charts draw.
"""

from typing import List

from agrosage.models.schemas import (
    ChartPoint, PriceForecastingOutput, RiskEntry, SuitabilityCell,
    SuitabilityEntry, SuitabilityGrid,
)


def suitability_band(score: float) -> str:
    if score > 80:
        return "good"
    if score > 60:
        return "fair"
    if score > 40:
        return "poor"
    return "bad"


def risk_band(score: float) -> str:
    if score > 8:
        return "severe"
    if score > 6:
        return "high"
    if score > 4:
        return "moderate"
    return "low"


def pivot_suitability(entries: List[SuitabilityEntry]) -> SuitabilityGrid:
    """District rows × crop columns, in first-seen order. Missing pairs score 0 with remark N/A."""
    districts = list(dict.fromkeys(e.district for e in entries))
    crops = list(dict.fromkeys(e.crop for e in entries))
    lookup = {(e.district, e.crop): e for e in entries}

    grid = {}
    for district in districts:
        grid[district] = {}
        for crop in crops:
            entry = lookup.get((district, crop))
            score = entry.suitability_score if entry else 0
            grid[district][crop] = SuitabilityCell(
                score=score,
                remark=entry.remark if entry else "N/A",
                band=suitability_band(score),
            )
    return SuitabilityGrid(districts=districts, crops=crops, grid=grid)


def sort_risk(entries: List[RiskEntry]) -> List[RiskEntry]:
    return sorted(entries, key=lambda e: e.overall_risk, reverse=True)


def price_forecast_chart(forecast: PriceForecastingOutput) -> List[ChartPoint]:
    return [ChartPoint(day=f"Day {i + 1}", price=p) for i, p in enumerate(forecast.prices)]
