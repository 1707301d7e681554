from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from loguru import logger

from app.core.logging import setup_logging
from app.core.init_db import init_db
from app.core.errors import LoginRequired
from app.api.router import api_router

setup_logging()
logger.info("Starting Sonie Atelier storefront")


app = FastAPI(
    title="Sonie Atelier",
    version="0.1.0"
)

# Storefront, admin console and upload signing
app.include_router(api_router)


@app.exception_handler(LoginRequired)
def redirect_to_login(request: Request, exc: LoginRequired):
    logger.debug(f"Login required for {request.url.path}")
    return RedirectResponse("/admin", status_code=303)


# Init DB after app is created
init_db()

@app.get("/health")
def health():
    logger.debug("Health check hit")
    return {"status": "ok"}
