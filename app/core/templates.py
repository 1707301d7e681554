from pathlib import Path

from fastapi.templating import Jinja2Templates

from app.modules.catalog.images import hero_image
from app.modules.catalog.service import format_price

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.filters["price"] = format_price
templates.env.globals["hero_image"] = hero_image
