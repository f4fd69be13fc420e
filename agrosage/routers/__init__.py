from .agent import router as agent_router
from .auth import router as auth_router
from .flows import router as flows_router
from .government import router as government_router
from .health import router as health_router
from .market import router as market_router
from .pages import router as pages_router
