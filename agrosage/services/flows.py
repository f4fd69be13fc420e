"""
AgroSage — Prompt Flows
────────────────────────
A flow is a named prompt template with a typed input and a typed output.
The rendered prompt is sent to the generative model and the JSON it returns
is validated against the output model. Anything that does not validate is a
FlowError; callers never see a partially-populated result.
"""

import json
import logging
import re
from typing import Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from agrosage.models.schemas import (
    AgentPricePredictionInput, AgentPricePredictionOutput,
    AgrobotAssistanceInput, AgrobotAssistanceOutput,
    CropRecommendationsOutput, CropSuitabilityOutput,
    DiagnoseCropDiseaseInput, DiagnoseCropDiseaseOutput,
    PolicyAdvisorInput, PolicyRecommendationOutput,
    PriceForecastingInput, PriceForecastingOutput,
    RiskHeatmapOutput,
    YieldForecastingInput, YieldForecastingOutput,
)
from agrosage.services.genai_client import GenAIClient, Part

logger = logging.getLogger("agrosage.flows")

In = TypeVar("In", bound=BaseModel)
Out = TypeVar("Out", bound=BaseModel)

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")


class FlowError(RuntimeError):
    """The model's output could not be turned into the flow's output schema."""

    def __init__(self, flow: str, detail: str):
        super().__init__(f"{flow}: {detail}")
        self.flow = flow
        self.detail = detail


def strip_code_fences(text: str) -> str:
    s = text.strip()
    s = _FENCE_START.sub("", s)
    s = _FENCE_END.sub("", s)
    return s


class Flow(Generic[In, Out]):
    def __init__(
        self,
        name: str,
        prompt: str,
        output_model: Type[Out],
        input_model: Optional[Type[In]] = None,
        media_field: Optional[str] = None,
    ):
        self.name = name
        self.prompt = prompt
        self.output_model = output_model
        self.input_model = input_model
        self.media_field = media_field

    def render(self, data: Optional[In] = None) -> List[Part]:
        values = data.model_dump() if data is not None else {}
        if self.media_field:
            values.pop(self.media_field, None)
        text = self.prompt.format(**values)
        schema = json.dumps(self.output_model.model_json_schema(), ensure_ascii=False)
        text += (
            "\n\nRespond with a single JSON object that conforms to this JSON schema. "
            "Do not add any text outside the JSON.\n"
            f"{schema}"
        )
        parts: List[Part] = [text]
        if self.media_field and data is not None:
            parts.append({"mime_type": data.mime_type, "data": data.data})
        return parts

    def parse(self, raw: str) -> Out:
        if not raw or not raw.strip():
            raise FlowError(self.name, "model returned an empty response")
        try:
            payload = json.loads(strip_code_fences(raw))
        except json.JSONDecodeError as e:
            raise FlowError(self.name, f"response is not valid JSON: {e.msg}") from e
        try:
            return self.output_model.model_validate(payload)
        except ValidationError as e:
            raise FlowError(self.name, f"response failed schema validation: {e.error_count()} error(s)") from e

    async def run(self, client: GenAIClient, data: Optional[In] = None) -> Out:
        if self.input_model is not None and data is None:
            raise ValueError(f"Flow {self.name} requires {self.input_model.__name__}")
        logger.info("Running flow %s", self.name)
        raw = await client.generate(self.render(data))
        try:
            return self.parse(raw)
        except FlowError as e:
            logger.warning("Flow %s rejected model output: %s", self.name, e.detail)
            raise


# ─── PROMPT TEMPLATES ────────────────────────────────────────────────────────

PRICE_FORECASTING = Flow(
    name="priceForecasting",
    input_model=PriceForecastingInput,
    output_model=PriceForecastingOutput,
    prompt=(
        "You are an AI assistant that predicts the price of crops for farmers.\n"
        "Given the crop name: {crop} and location: {location},\n"
        "predict the prices for the next 7 days. Also provide the unit of the predicted "
        "prices and the trend of the prices (increasing, decreasing or stable).\n"
        "The prices should be in Indian Rupees."
    ),
)

YIELD_FORECASTING = Flow(
    name="yieldForecasting",
    input_model=YieldForecastingInput,
    output_model=YieldForecastingOutput,
    prompt=(
        "You are an agricultural AI expert. Based on the crop type '{crop}', farm area "
        "'{area}' acres, and '{location}' location, forecast the yield and profit.\n"
        "- Predict the expected yield in kg/acre.\n"
        "- Calculate the total yield.\n"
        "- Predict the market price per kg.\n"
        "- Calculate the total potential income.\n"
        "- Suggest the best date to sell.\n"
        "- Recommend the best mandi (market) for selling.\n"
        "Provide realistic but fictional data for an Indian context."
    ),
)

DIAGNOSE_CROP_DISEASE = Flow(
    name="diagnoseCropDisease",
    input_model=DiagnoseCropDiseaseInput,
    output_model=DiagnoseCropDiseaseOutput,
    media_field="photo_data_uri",
    prompt=(
        "You are an AI assistant specialized in diagnosing crop diseases from images.\n"
        "Analyze the attached crop image and identify any diseases present.\n"
        "If a disease is detected, provide the disease name, severity (low, medium, high) "
        "and a confidence level between 0 and 1, and suggest a treatment.\n"
        "If no disease is detected, set disease_name to null and use treatment_suggestion "
        "to say that the crop appears healthy."
    ),
)

AGROBOT_ASSISTANCE = Flow(
    name="agrobotAssistance",
    input_model=AgrobotAssistanceInput,
    output_model=AgrobotAssistanceOutput,
    prompt=(
        "You are an AI chatbot named AgroBot designed to assist farmers with their queries.\n"
        "Provide informative and helpful responses related to farming practices, market "
        "trends, and crop management.\n"
        "Use the following question to formulate your response:\n\n"
        "Question: {query}"
    ),
)

AGENT_PRICE_PREDICTION = Flow(
    name="agentPricePrediction",
    input_model=AgentPricePredictionInput,
    output_model=AgentPricePredictionOutput,
    prompt=(
        "You are an AI market analyst for agricultural commodities in India.\n"
        "Given the crop: {crop}, predict the prices for the next 7 days across the mandis "
        "of Pune, Nagpur, Bangalore, and Delhi. Label the days \"Day 1\" to \"Day 7\".\n"
        "Identify any significant price spikes (unusually high price increases) in your "
        "forecast and mark them with is_spike.\n"
        "Provide a realistic but fictional forecast. Prices should be in INR per quintal.\n"
        "Generate predictions for all four mandis."
    ),
)

CROP_RECOMMENDATIONS = Flow(
    name="cropRecommendations",
    output_model=CropRecommendationsOutput,
    prompt=(
        "You are an AI agricultural market analyst. Based on simulated market data, upcoming "
        "festivals, and export trends, recommend three crops that have high demand potential "
        "right now in India.\n"
        "For each crop, provide a brief reason for the recommendation and a demand score "
        "from 1 to 10.\n"
        "Generate three unique and realistic recommendations."
    ),
)

CROP_SUITABILITY = Flow(
    name="cropSuitability",
    output_model=CropSuitabilityOutput,
    prompt=(
        "You are an AI agricultural analyst. Generate a crop suitability map for India.\n"
        "Consider the districts: Pune, Nagpur, Lucknow, Bangalore, Delhi.\n"
        "Consider the crops: Wheat, Rice, Cotton, Sugarcane, Soybean.\n"
        "For each district-crop combination, provide a suitability score (0-100) and a brief "
        "remark based on fictional environmental factors (soil type, climate, water "
        "availability).\n"
        "Generate a total of 25 entries (5 districts x 5 crops)."
    ),
)

RISK_HEATMAP = Flow(
    name="riskHeatmap",
    output_model=RiskHeatmapOutput,
    prompt=(
        "You are an AI agricultural risk analyst. Generate a risk heatmap for the following "
        "crops: Tomato, Onion, Wheat, Potato, Rice, Sugarcane, Cotton.\n"
        "For each crop, provide a risk score (1-10, where 10 is highest risk) for:\n"
        "1. Disease Risk (susceptibility to common diseases)\n"
        "2. Supply Chain Risk (fragility due to transport, storage needs)\n"
        "3. Market Volatility (price fluctuation)\n"
        "4. Overall Risk (a weighted average)\n"
        "Provide realistic but fictional scores based on general knowledge of these crops "
        "in the Indian context."
    ),
)

POLICY_ADVISOR = Flow(
    name="policyAdvisor",
    input_model=PolicyAdvisorInput,
    output_model=PolicyRecommendationOutput,
    prompt=(
        "You are an AI policy advisor for government officials. Based on the current "
        "agricultural data, provide a policy recommendation.\n\n"
        "District-Wise Yield Index: {district_wise_yield_index}\n"
        "MSP Compliance Chart: {msp_compliance_chart}\n"
        "Complaint Heatmap: {complaint_heatmap}"
    ),
)

FLOWS: Dict[str, Flow] = {
    f.name: f for f in (
        PRICE_FORECASTING, YIELD_FORECASTING, DIAGNOSE_CROP_DISEASE, AGROBOT_ASSISTANCE,
        AGENT_PRICE_PREDICTION, CROP_RECOMMENDATIONS, CROP_SUITABILITY, RISK_HEATMAP,
        POLICY_ADVISOR,
    )
}


# ─── TYPED ENTRY POINTS ──────────────────────────────────────────────────────

async def predict_crop_price(client: GenAIClient, data: PriceForecastingInput) -> PriceForecastingOutput:
    return await PRICE_FORECASTING.run(client, data)


async def predict_yield_and_profit(client: GenAIClient, data: YieldForecastingInput) -> YieldForecastingOutput:
    return await YIELD_FORECASTING.run(client, data)


async def diagnose_crop_disease(client: GenAIClient, data: DiagnoseCropDiseaseInput) -> DiagnoseCropDiseaseOutput:
    return await DIAGNOSE_CROP_DISEASE.run(client, data)


async def agrobot_assistance(client: GenAIClient, data: AgrobotAssistanceInput) -> AgrobotAssistanceOutput:
    return await AGROBOT_ASSISTANCE.run(client, data)


async def agent_price_prediction(client: GenAIClient, data: AgentPricePredictionInput) -> AgentPricePredictionOutput:
    return await AGENT_PRICE_PREDICTION.run(client, data)


async def get_crop_recommendations(client: GenAIClient) -> CropRecommendationsOutput:
    return await CROP_RECOMMENDATIONS.run(client)


async def get_crop_suitability(client: GenAIClient) -> CropSuitabilityOutput:
    return await CROP_SUITABILITY.run(client)


async def get_risk_heatmap(client: GenAIClient) -> RiskHeatmapOutput:
    return await RISK_HEATMAP.run(client)


async def get_policy_recommendation(client: GenAIClient, data: PolicyAdvisorInput) -> PolicyRecommendationOutput:
    return await POLICY_ADVISOR.run(client, data)
