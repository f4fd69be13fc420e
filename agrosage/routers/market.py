"""
AgroSage — /api/market Router
Synthetic mandi data for the live price board. The page re-polls /snapshot
every MARKET_REFRESH_SECONDS to simulate live prices.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from agrosage.models.schemas import MandiData, MarketSnapshot, PricePoint, SupplyChainData
from agrosage.services.market_service import (
    SUPPLY_CHAIN, build_snapshot, generate_price_history, static_market_data,
)

logger = logging.getLogger("agrosage.router.market")
router = APIRouter(prefix="/api/market", tags=["Market"])


@router.get("/snapshot", response_model=MarketSnapshot, summary="One live-board refresh for a crop")
async def snapshot(crop: Optional[str] = Query(None, description="Crop to focus, e.g. Tomato")):
    try:
        return build_snapshot(crop)
    except ValueError as e:
        logger.warning("Snapshot failed: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/mandis", response_model=List[MandiData], summary="Fixed crop/mandi dataset with fresh history")
async def mandis():
    return static_market_data()


@router.get("/history", response_model=List[PricePoint], summary="Random-walk price history")
async def history(
    base_price: float = Query(..., gt=0, le=1_000_000),
    days: int = Query(7, ge=1, le=365),
    jitter: float = Query(0.0, ge=0, le=0.5),
):
    return generate_price_history(base_price, days, jitter=jitter)


@router.get("/supply-chain", response_model=SupplyChainData, summary="Mandi → retail/export flows")
async def supply_chain():
    return SUPPLY_CHAIN
