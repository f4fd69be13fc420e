from .genai_client import (
    GenAIClient, GenAIServiceError, MissingAPIKeyError, RateLimitExceededError, get_genai_client,
)
from .flows import FLOWS, Flow, FlowError
from .market_service import build_snapshot, static_market_data, SUPPLY_CHAIN
from .agent_service import alert_console, query_desk, NotFoundError
from .government_service import build_overview, policy_input
