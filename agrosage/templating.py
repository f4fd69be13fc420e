from pathlib import Path

from fastapi.templating import Jinja2Templates

from agrosage import config

BASE_DIR = Path(__file__).parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals.update(
    app_name=config.APP_NAME,
    market_refresh_ms=config.MARKET_REFRESH_SECONDS * 1000,
    alert_interval_ms=config.ALERT_INTERVAL_SECONDS * 1000,
)


def inr(value, digits: int = 0) -> str:
    """₹ with Indian digit grouping (12,34,567)."""
    if value is None:
        return "—"
    negative = value < 0
    whole, _, frac = f"{abs(value):.{digits}f}".partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    text = f"₹{whole}" + (f".{frac}" if frac else "")
    return f"-{text}" if negative else text


templates.env.filters["inr"] = inr
