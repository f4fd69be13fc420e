"""Prompt flows: rendering, output validation, and the /api/flows error mapping."""

import asyncio
import base64
import json
from types import SimpleNamespace

import pytest

from agrosage.models.schemas import (
    AgrobotAssistanceInput, DiagnoseCropDiseaseInput, PriceForecastingInput, PriceForecastingOutput,
)
from agrosage.services import flows
from agrosage.services.flows import FLOWS, Flow, FlowError, strip_code_fences
from agrosage.services.genai_client import (
    GenAIClient, GenAIServiceError, MissingAPIKeyError, RateLimitExceededError,
)
from tests.conftest import FakeGenAIClient

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
PNG_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

PRICE_REPLY = {"prices": [25, 26, 27, 27.5, 28, 29, 30], "unit": "₹/kg", "trend": "increasing"}


def run(coro):
    return asyncio.run(coro)


# ── Flow unit behaviour ──────────────────────────────────────────────────────

def test_all_flows_registered():
    assert set(FLOWS) == {
        "priceForecasting", "yieldForecasting", "diagnoseCropDisease", "agrobotAssistance",
        "agentPricePrediction", "cropRecommendations", "cropSuitability", "riskHeatmap",
        "policyAdvisor",
    }


def test_render_fills_template_and_appends_schema():
    parts = FLOWS["priceForecasting"].render(PriceForecastingInput(crop="Tomato", location="Pune"))
    assert len(parts) == 1
    text = parts[0]
    assert "Tomato" in text and "Pune" in text
    assert json.dumps(PriceForecastingOutput.model_json_schema(), ensure_ascii=False) in text


def test_render_attaches_image_part():
    parts = FLOWS["diagnoseCropDisease"].render(DiagnoseCropDiseaseInput(photo_data_uri=PNG_URI))
    assert len(parts) == 2
    assert parts[1] == {"mime_type": "image/png", "data": PNG_BYTES}
    assert "base64" not in parts[0]


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


def test_parse_accepts_fenced_json():
    out = FLOWS["priceForecasting"].parse("```json\n" + json.dumps(PRICE_REPLY) + "\n```")
    assert out.prices[0] == 25
    assert out.trend == "increasing"


@pytest.mark.parametrize("raw", [
    "",
    "not json at all",
    json.dumps({"prices": [], "unit": "₹/kg", "trend": "stable"}),
    json.dumps({"unit": "₹/kg", "trend": "stable"}),
])
def test_parse_rejects_bad_output(raw):
    with pytest.raises(FlowError):
        FLOWS["priceForecasting"].parse(raw)


def test_run_requires_input_when_flow_has_one():
    with pytest.raises(ValueError):
        run(FLOWS["agrobotAssistance"].run(FakeGenAIClient(reply={"response": "hi"})))


def test_typed_entry_point_returns_model():
    fake = FakeGenAIClient(reply={"response": "Water early in the morning."})
    out = run(flows.agrobot_assistance(fake, AgrobotAssistanceInput(query="  When to water?  ")))
    assert out.response == "Water early in the morning."
    assert "Question: When to water?" in fake.calls[0][0]


def test_flow_without_input_renders_plain_prompt():
    flow = Flow(name="x", prompt="Say hi.", output_model=PriceForecastingOutput)
    assert flow.render()[0].startswith("Say hi.")


# ── /api/flows endpoints ─────────────────────────────────────────────────────

def test_price_forecasting_ok(client, fake_client):
    fake_client.reply = PRICE_REPLY
    res = client.post("/api/flows/price-forecasting", json={"crop": "Tomato", "location": "Pune"})
    assert res.status_code == 200
    assert res.json() == {"prices": [25.0, 26.0, 27.0, 27.5, 28.0, 29.0, 30.0], "unit": "₹/kg", "trend": "increasing"}


def test_price_forecasting_chart(client, fake_client):
    fake_client.reply = PRICE_REPLY
    res = client.post("/api/flows/price-forecasting/chart", json={"crop": "Tomato", "location": "Pune"})
    assert res.status_code == 200
    points = res.json()
    assert [p["day"] for p in points] == [f"Day {i}" for i in range(1, 8)]
    assert points[-1]["price"] == 30


def test_blank_input_rejected_before_model_call(client, fake_client):
    res = client.post("/api/flows/price-forecasting", json={"crop": "  ", "location": "Pune"})
    assert res.status_code == 422
    assert fake_client.calls == []


def test_yield_forecasting_out_of_range_is_502(client, fake_client):
    fake_client.reply = {
        "expected_yield": -5, "total_yield": 100, "predicted_price": 20, "total_income": 2000,
        "best_sell_date": "2025-11-01", "recommended_mandi": "Pune",
    }
    res = client.post("/api/flows/yield-forecasting", json={"crop": "Wheat", "area": 2.5, "location": "Pune"})
    assert res.status_code == 502
    assert res.json()["detail"].startswith("Failed to get yield forecast")
    assert res.json()["error"] == "Bad Gateway"
    assert res.json()["code"] == 502


def test_diagnosis_healthy_crop(client, fake_client):
    fake_client.reply = {
        "disease_name": None, "severity": "low", "confidence": 0.92,
        "treatment_suggestion": "The crop appears healthy.",
    }
    res = client.post("/api/flows/crop-disease-diagnosis", json={"photo_data_uri": PNG_URI})
    assert res.status_code == 200
    assert res.json()["disease_name"] is None
    assert fake_client.calls[0][1]["mime_type"] == "image/png"


def test_diagnosis_rejects_non_data_uri(client, fake_client):
    res = client.post("/api/flows/crop-disease-diagnosis", json={"photo_data_uri": "http://x/leaf.png"})
    assert res.status_code == 422
    assert fake_client.calls == []


def test_diagnosis_confidence_above_one_is_502(client, fake_client):
    fake_client.reply = {"disease_name": "Blight", "severity": "high", "confidence": 87, "treatment_suggestion": "Spray."}
    res = client.post("/api/flows/crop-disease-diagnosis", json={"photo_data_uri": PNG_URI})
    assert res.status_code == 502


def test_agent_price_prediction(client, fake_client):
    fake_client.reply = {"predictions": [
        {"mandi": "Pune", "forecast": [{"day": "Day 1", "price": 2500, "is_spike": False},
                                       {"day": "Day 2", "price": 3100, "is_spike": True}]},
    ]}
    res = client.post("/api/flows/agent-price-prediction", json={"crop": "Onion"})
    assert res.status_code == 200
    assert res.json()["predictions"][0]["forecast"][1]["is_spike"] is True


def test_recommendations_demand_score_bounds(client, fake_client):
    fake_client.reply = {"recommendations": [{"crop": "Onion", "reason": "Festival demand", "demand_score": 11}]}
    assert client.post("/api/flows/crop-recommendations").status_code == 502

    fake_client.reply = {"recommendations": [{"crop": "Onion", "reason": "Festival demand", "demand_score": 9}]}
    res = client.post("/api/flows/crop-recommendations")
    assert res.status_code == 200
    assert res.json()["recommendations"][0]["crop"] == "Onion"


def test_suitability_grid_pivot(client, fake_client):
    fake_client.reply = {"suitability_map": [
        {"district": "Pune", "crop": "Wheat", "suitability_score": 85, "remark": "Good soil"},
        {"district": "Pune", "crop": "Rice", "suitability_score": 40, "remark": "Low water"},
        {"district": "Nagpur", "crop": "Wheat", "suitability_score": 65, "remark": "Fair"},
    ]}
    res = client.post("/api/flows/crop-suitability/grid")
    assert res.status_code == 200
    grid = res.json()
    assert grid["districts"] == ["Pune", "Nagpur"]
    assert grid["crops"] == ["Wheat", "Rice"]
    assert grid["grid"]["Pune"]["Wheat"]["band"] == "good"
    assert grid["grid"]["Nagpur"]["Rice"] == {"score": 0, "remark": "N/A", "band": "bad"}


def test_risk_heatmap_sorted_by_overall(client, fake_client):
    fake_client.reply = {"risk_data": [
        {"crop": "Wheat", "disease_risk": 3, "supply_chain_risk": 2, "market_volatility": 3, "overall_risk": 3},
        {"crop": "Tomato", "disease_risk": 8, "supply_chain_risk": 9, "market_volatility": 9, "overall_risk": 9},
        {"crop": "Onion", "disease_risk": 5, "supply_chain_risk": 6, "market_volatility": 9, "overall_risk": 7},
    ]}
    res = client.post("/api/flows/risk-heatmap")
    assert res.status_code == 200
    assert [r["crop"] for r in res.json()] == ["Tomato", "Onion", "Wheat"]


def test_policy_advisor(client, fake_client):
    fake_client.reply = {"policy_recommendation": "Raise procurement in Nagpur."}
    payload = client.get("/api/government/policy-input").json()
    res = client.post("/api/flows/policy-advisor", json=payload)
    assert res.status_code == 200
    assert res.json()["policy_recommendation"] == "Raise procurement in Nagpur."
    assert payload["district_wise_yield_index"] in fake_client.calls[0][0]


@pytest.mark.parametrize("error, code", [
    (MissingAPIKeyError("GEMINI_API_KEY is not configured."), 503),
    (RateLimitExceededError("slow down"), 429),
    (GenAIServiceError("boom"), 502),
])
def test_client_errors_are_mapped(client, fake_client, error, code):
    fake_client.error = error
    res = client.post("/api/flows/agrobot", json={"query": "Hello"})
    assert res.status_code == code


# ── GenAIClient error mapping ────────────────────────────────────────────────

class StubModel:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error

    async def generate_content_async(self, parts):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def client_with(model: StubModel) -> GenAIClient:
    genai_client = GenAIClient(api_key="test-key")
    genai_client._model = model
    return genai_client


def test_generate_without_key_raises_missing_key():
    genai_client = GenAIClient(api_key="")
    assert not genai_client.configured
    with pytest.raises(MissingAPIKeyError):
        run(genai_client.generate(["hi"]))


@pytest.mark.parametrize("message", ["429 Resource exhausted", "Rate limit hit", "Quota exceeded for project"])
def test_generate_rate_limit_messages(message):
    with pytest.raises(RateLimitExceededError):
        run(client_with(StubModel(error=Exception(message))).generate(["hi"]))


def test_generate_other_failure_is_service_error():
    with pytest.raises(GenAIServiceError) as info:
        run(client_with(StubModel(error=ValueError("blocked"))).generate(["hi"]))
    assert type(info.value) is GenAIServiceError
    assert isinstance(info.value.__cause__, ValueError)


def test_generate_strips_and_handles_empty_text():
    assert run(client_with(StubModel(text="  {\"a\": 1}\n")).generate(["hi"])) == '{"a": 1}'
    assert run(client_with(StubModel(text=None)).generate(["hi"])) == ""
