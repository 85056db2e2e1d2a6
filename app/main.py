import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.exceptions import TradeFeedError
from app.logging_config import configure_logging
from app.routers import snaptrade

# Configure logging at startup
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="TradeFeed Sync")

# Routers
app.include_router(snaptrade.router, prefix="/snaptrade", tags=["snaptrade"])


@app.exception_handler(TradeFeedError)
async def tradefeed_error_handler(request: Request, exc: TradeFeedError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.http_status, content={"success": False, "error": str(exc)}
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}
