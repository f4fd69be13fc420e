"""
AgroSage — /api/flows Router
──────────────────────────────
One POST endpoint per generative-AI flow. Model output that fails schema
validation is reported as a 502; the dashboard shows an error instead of a
half-filled card.
"""

import logging
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, status

from agrosage.models.schemas import (
    AgentPricePredictionInput, AgentPricePredictionOutput,
    AgrobotAssistanceInput, AgrobotAssistanceOutput,
    CropRecommendationsOutput, CropSuitabilityOutput,
    DiagnoseCropDiseaseInput, DiagnoseCropDiseaseOutput,
    ErrorResponse,
    PolicyAdvisorInput, PolicyRecommendationOutput,
    PriceForecastingInput, PriceForecastingOutput,
    RiskHeatmapOutput, SuitabilityGrid, RiskEntry, ChartPoint,
    YieldForecastingInput, YieldForecastingOutput,
)
from agrosage.services import flows
from agrosage.services.flows import FlowError
from agrosage.services.genai_client import (
    GenAIClient, GenAIServiceError, MissingAPIKeyError, RateLimitExceededError, get_genai_client,
)
from agrosage.services.presentation import pivot_suitability, price_forecast_chart, sort_risk

logger = logging.getLogger("agrosage.router.flows")
router = APIRouter(prefix="/api/flows", tags=["AI Flows"])

T = TypeVar("T")

FLOW_ERRORS = {
    429: {"model": ErrorResponse, "description": "AI rate limit reached"},
    502: {"model": ErrorResponse, "description": "AI response failed schema validation"},
    503: {"model": ErrorResponse, "description": "AI service not configured"},
}


async def _run(call: Awaitable[T], failure_message: str) -> T:
    try:
        return await call
    except FlowError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"{failure_message} ({e.detail})")
    except MissingAPIKeyError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except RateLimitExceededError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
    except GenAIServiceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"{failure_message} ({e})")


# ─── FARMER ──────────────────────────────────────────────────────────────────

@router.post("/price-forecasting", response_model=PriceForecastingOutput, responses=FLOW_ERRORS,
             summary="7-day price forecast for a crop at a location")
async def price_forecasting(req: PriceForecastingInput, client: GenAIClient = Depends(get_genai_client)):
    logger.info("Price forecast: crop=%s, location=%s", req.crop, req.location)
    return await _run(flows.predict_crop_price(client, req), "Failed to get price forecast")


@router.post("/price-forecasting/chart", response_model=list[ChartPoint], responses=FLOW_ERRORS,
             summary="Price forecast as Day 1..N chart points")
async def price_forecasting_chart(req: PriceForecastingInput, client: GenAIClient = Depends(get_genai_client)):
    result = await _run(flows.predict_crop_price(client, req), "Failed to get price forecast")
    return price_forecast_chart(result)


@router.post("/yield-forecasting", response_model=YieldForecastingOutput, responses=FLOW_ERRORS,
             summary="Yield and profit forecast for a farm")
async def yield_forecasting(req: YieldForecastingInput, client: GenAIClient = Depends(get_genai_client)):
    logger.info("Yield forecast: crop=%s, area=%.1f, location=%s", req.crop, req.area, req.location)
    return await _run(flows.predict_yield_and_profit(client, req), "Failed to get yield forecast")


@router.post("/crop-disease-diagnosis", response_model=DiagnoseCropDiseaseOutput, responses=FLOW_ERRORS,
             summary="Diagnose crop disease from a photo data URI")
async def crop_disease_diagnosis(req: DiagnoseCropDiseaseInput, client: GenAIClient = Depends(get_genai_client)):
    logger.info("Crop diagnosis: image type=%s", req.mime_type)
    return await _run(flows.diagnose_crop_disease(client, req), "Failed to diagnose crop disease")


@router.post("/agrobot", response_model=AgrobotAssistanceOutput, responses=FLOW_ERRORS,
             summary="Ask AgroBot a farming question")
async def agrobot(req: AgrobotAssistanceInput, client: GenAIClient = Depends(get_genai_client)):
    return await _run(flows.agrobot_assistance(client, req), "AgroBot could not answer right now")


# ─── AGENT ───────────────────────────────────────────────────────────────────

@router.post("/agent-price-prediction", response_model=AgentPricePredictionOutput, responses=FLOW_ERRORS,
             summary="7-day multi-mandi forecast with spike detection")
async def agent_price_prediction(req: AgentPricePredictionInput, client: GenAIClient = Depends(get_genai_client)):
    logger.info("Agent price prediction: crop=%s", req.crop)
    return await _run(flows.agent_price_prediction(client, req), "Failed to get price prediction")


@router.post("/crop-recommendations", response_model=CropRecommendationsOutput, responses=FLOW_ERRORS,
             summary="Three high-demand crops right now")
async def crop_recommendations(client: GenAIClient = Depends(get_genai_client)):
    return await _run(flows.get_crop_recommendations(client), "Failed to get AI recommendations")


@router.post("/crop-suitability", response_model=CropSuitabilityOutput, responses=FLOW_ERRORS,
             summary="District × crop suitability scores")
async def crop_suitability(client: GenAIClient = Depends(get_genai_client)):
    return await _run(flows.get_crop_suitability(client), "Failed to get crop suitability analysis")


@router.post("/crop-suitability/grid", response_model=SuitabilityGrid, responses=FLOW_ERRORS,
             summary="Suitability scores pivoted into a district × crop grid")
async def crop_suitability_grid(client: GenAIClient = Depends(get_genai_client)):
    result = await _run(flows.get_crop_suitability(client), "Failed to get crop suitability analysis")
    return pivot_suitability(result.suitability_map)


@router.post("/risk-heatmap", response_model=list[RiskEntry], responses=FLOW_ERRORS,
             summary="Crop risk scores, highest overall risk first")
async def risk_heatmap(client: GenAIClient = Depends(get_genai_client)):
    result: RiskHeatmapOutput = await _run(flows.get_risk_heatmap(client), "Failed to get risk analysis")
    return sort_risk(result.risk_data)


# ─── GOVERNMENT ──────────────────────────────────────────────────────────────

@router.post("/policy-advisor", response_model=PolicyRecommendationOutput, responses=FLOW_ERRORS,
             summary="Policy recommendation from yield, MSP and grievance summaries")
async def policy_advisor(req: PolicyAdvisorInput, client: GenAIClient = Depends(get_genai_client)):
    return await _run(flows.get_policy_recommendation(client, req), "Failed to get policy recommendation")
