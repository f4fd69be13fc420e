"""
AgroSage — Pydantic Models
All request/response shapes are defined here, including the structured
output contract of every generative-AI flow.
"""

import base64
import binascii
import re
from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, validator

DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ─── ENUMS ───────────────────────────────────────────────────────────────────

class Role(str, Enum):
    FARMER     = "farmer"
    AGENT      = "agent"
    GOVERNMENT = "government"


class TrendDirection(str, Enum):
    UP   = "up"
    DOWN = "down"
    FLAT = "flat"


# ─── FLOW CONTRACTS ──────────────────────────────────────────────────────────

class _CropInput(BaseModel):
    @validator("*", pre=True)
    def strip_strings(cls, v):
        return v.strip() if isinstance(v, str) else v


class PriceForecastingInput(_CropInput):
    crop:      str = Field(..., min_length=1, description="The name of the crop to forecast the price for.")
    location:  str = Field(..., min_length=1, description="The location for which to forecast the price.")


class PriceForecastingOutput(BaseModel):
    prices:  List[float] = Field(..., min_length=1, description="Predicted prices for the next 7 days.")
    unit:    str         = Field(..., description="Unit of the predicted prices, e.g. ₹/kg.")
    trend:   str         = Field(..., description="increasing, decreasing or stable.")


class YieldForecastingInput(_CropInput):
    crop:      str   = Field(..., min_length=1, description="The name of the crop.")
    area:      float = Field(..., ge=0.1, le=10000, description="The area of land in acres.")
    location:  str   = Field(..., min_length=1, description="The location of the farm.")


class YieldForecastingOutput(BaseModel):
    expected_yield:     float = Field(..., ge=0, description="Expected yield in kg/acre.")
    total_yield:        float = Field(..., ge=0, description="Total expected yield for the given area in kg.")
    predicted_price:    float = Field(..., ge=0, description="Predicted market price per kg in ₹.")
    total_income:       float = Field(..., ge=0, description="Total expected income in ₹.")
    best_sell_date:     str   = Field(..., description="Recommended date to sell the produce.")
    recommended_mandi:  str   = Field(..., description="The recommended market (mandi) to sell at.")


class DiagnoseCropDiseaseInput(BaseModel):
    photo_data_uri: str = Field(
        ...,
        description="A photo of a crop as a data URI: 'data:<mimetype>;base64,<encoded_data>'.",
    )

    @validator("photo_data_uri")
    def check_data_uri(cls, v):
        match = DATA_URI_RE.match(v.strip())
        if not match:
            raise ValueError("photo_data_uri must look like data:<mimetype>;base64,<encoded_data>")
        try:
            base64.b64decode(match.group("data"), validate=False)
        except binascii.Error as e:
            raise ValueError(f"photo_data_uri is not valid base64: {e}")
        return v.strip()

    @property
    def mime_type(self) -> str:
        return DATA_URI_RE.match(self.photo_data_uri).group("mime")

    @property
    def data(self) -> bytes:
        return base64.b64decode(DATA_URI_RE.match(self.photo_data_uri).group("data"))


class DiagnoseCropDiseaseOutput(BaseModel):
    disease_name:          Optional[str] = Field(None, description="Identified disease, or null if the crop looks healthy.")
    severity:              str           = Field(..., description="low, medium or high.")
    confidence:            float         = Field(..., ge=0, le=1, description="Confidence of the detection (0-1).")
    treatment_suggestion:  str           = Field(..., description="Suggested treatment for the detected disease.")


class AgrobotAssistanceInput(_CropInput):
    query: str = Field(..., min_length=1, max_length=2000, description="The question or query from the farmer.")


class AgrobotAssistanceOutput(BaseModel):
    response: str = Field(..., min_length=1, description="The response from the AI chatbot.")


class AgentPricePredictionInput(_CropInput):
    crop: str = Field(..., min_length=1, description="The crop to predict prices for.")


class DailyPrice(BaseModel):
    day:       str   = Field(..., examples=["Day 1"])
    price:     float = Field(..., ge=0, description="INR per quintal")
    is_spike:  bool  = Field(..., description="True if this day is a significant price spike.")


class MandiPrediction(BaseModel):
    mandi:     str
    forecast:  List[DailyPrice] = Field(..., min_length=1)


class AgentPricePredictionOutput(BaseModel):
    predictions: List[MandiPrediction] = Field(..., min_length=1)


class Recommendation(BaseModel):
    crop:          str   = Field(..., description="The name of the recommended crop.")
    reason:        str   = Field(..., description="Why the crop is recommended (market trend, seasonal demand).")
    demand_score:  float = Field(..., ge=1, le=10, description="Current demand level, 1-10.")


class CropRecommendationsOutput(BaseModel):
    recommendations: List[Recommendation] = Field(..., min_length=1)


class SuitabilityEntry(BaseModel):
    district:           str
    crop:               str
    suitability_score:  float = Field(..., ge=0, le=100, description="Suitability from 0 to 100.")
    remark:             str   = Field(..., description="Why the crop is or is not suitable.")


class CropSuitabilityOutput(BaseModel):
    suitability_map: List[SuitabilityEntry] = Field(..., min_length=1)


class RiskEntry(BaseModel):
    crop:               str
    disease_risk:       float = Field(..., ge=1, le=10)
    supply_chain_risk:  float = Field(..., ge=1, le=10)
    market_volatility:  float = Field(..., ge=1, le=10)
    overall_risk:       float = Field(..., ge=1, le=10, description="Weighted average of all risks.")


class RiskHeatmapOutput(BaseModel):
    risk_data: List[RiskEntry] = Field(..., min_length=1)


class PolicyAdvisorInput(BaseModel):
    district_wise_yield_index:  str = Field(..., min_length=1, description="Ranked yield by district.")
    msp_compliance_chart:       str = Field(..., min_length=1, description="Current vs. MSP prices.")
    complaint_heatmap:          str = Field(..., min_length=1, description="Sentiment map of farmer grievances.")


class PolicyRecommendationOutput(BaseModel):
    policy_recommendation: str = Field(..., min_length=1, description="Recommended policy adjustments.")


# ─── PRESENTATION VIEWS OVER FLOW OUTPUTS ────────────────────────────────────

class SuitabilityCell(BaseModel):
    score:   float
    remark:  str
    band:    str


class SuitabilityGrid(BaseModel):
    districts:  List[str]
    crops:      List[str]
    grid:       Dict[str, Dict[str, SuitabilityCell]]


class ChartPoint(BaseModel):
    day:    str
    price:  float


# ─── MARKET DATA ─────────────────────────────────────────────────────────────

class PricePoint(BaseModel):
    date:   str = Field(..., description="ISO date string YYYY-MM-DD")
    price:  int


class MandiData(BaseModel):
    crop:           str
    mandi:          str
    price_history:  List[PricePoint]
    volume:         int = Field(..., description="Traded volume in metric tons")

    @property
    def latest_price(self) -> int:
        return self.price_history[-1].price


class SupplyChainNode(BaseModel):
    name: str


class SupplyChainLink(BaseModel):
    source:  int = Field(..., description="Index in nodes")
    target:  int = Field(..., description="Index in nodes")
    value:   int


class SupplyChainData(BaseModel):
    nodes:  List[SupplyChainNode]
    links:  List[SupplyChainLink]


class ProfitOpportunity(BaseModel):
    crop:        str
    buy_mandi:   str
    buy_price:   int
    sell_mandi:  str
    sell_price:  int
    spread:      float = Field(..., description="₹/qtl between sell and buy mandi")


class PriceTrend(BaseModel):
    mandi:       str
    direction:   TrendDirection
    change_pct:  float


class TradeVolume(BaseModel):
    crop:    str
    volume:  int


class MarketSnapshot(BaseModel):
    crops:               List[str]
    selected_crop:       str
    rows:                List[MandiData]
    chart:               List[dict] = Field(..., description="One row per date, one column per mandi")
    trends:              List[PriceTrend]
    trade_volume:        List[TradeVolume]
    profit_opportunity:  Optional[ProfitOpportunity] = None
    generated_at:        str


# ─── AGENT TOOLS ─────────────────────────────────────────────────────────────

class Commission(BaseModel):
    id:                 str
    crop:               str
    volume:             int   = Field(..., description="Quintals")
    price_per_quintal:  int
    commission_rate:    float = Field(..., ge=1.5, le=5, description="Percent")
    total_commission:   float
    status:             Literal["Paid", "Pending"]
    date:               str


class CommissionByCrop(BaseModel):
    crop:     str
    paid:     float
    pending:  float


class CommissionSummary(BaseModel):
    total_earned:   float
    total_pending:  float
    by_crop:        List[CommissionByCrop]
    deals:          List[Commission]


class SmartContractLog(BaseModel):
    tx_id:        str
    timestamp:    str
    farmer:       str
    agent:        str
    crop:         str
    volume:       int
    price:        int
    total_value:  int
    status:       Literal["Confirmed", "Pending", "Failed"]


class AlertItem(BaseModel):
    id:           str
    type:         Literal["price", "supply", "announcement"]
    title:        str
    description:  str
    timestamp:    datetime
    is_read:      bool = False


class AlertFeed(BaseModel):
    alerts:  List[AlertItem]
    unread:  int


class Farmer(BaseModel):
    id:        str
    name:      str
    avatar:    str
    fallback:  str


class QueryMessage(BaseModel):
    sender:     Literal["farmer", "agent"]
    text:       str
    timestamp:  str


class FarmerQuery(BaseModel):
    id:         str
    farmer:     Farmer
    subject:    str
    topic:      Literal["disease", "market"]
    messages:   List[QueryMessage]
    is_read:    bool


class ReplyRequest(BaseModel):
    text: str = Field(..., max_length=2000)

    @validator("text")
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("Reply cannot be empty.")
        return v.strip()


class FarmerLocation(BaseModel):
    id:         str
    name:       str
    avatar:     str
    fallback:   str
    location:   str
    status:     Literal["Online", "Offline", "In-Transaction"]
    last_seen:  str


# ─── GOVERNMENT VIEW ─────────────────────────────────────────────────────────

class DistrictYield(BaseModel):
    rank:         int
    district:     str
    yield_index:  float = Field(..., description="100 = national average")


class MspCompliance(BaseModel):
    crop:          str
    msp:           int   = Field(..., description="₹/qtl")
    market_price:  int   = Field(..., description="₹/qtl")
    gap_pct:       float
    compliant:     bool


class ComplaintHotspot(BaseModel):
    district:    str
    complaints:  Dict[str, int]
    total:       int
    sentiment:   float = Field(..., ge=-1, le=1)


class GovernmentOverview(BaseModel):
    yield_index:        List[DistrictYield]
    msp_compliance:     List[MspCompliance]
    complaint_heatmap:  List[ComplaintHotspot]
    generated_at:       str


# ─── AUTH (simulated) ────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email:     str
    password:  str

    @validator("email", pre=True)
    def check_email(cls, v):
        v = (v or "").strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v

    @validator("password")
    def check_password(cls, v):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v


class ErrorResponse(BaseModel):
    error:   str
    detail:  Optional[str] = None
    code:    int
