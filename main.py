import uvicorn
import time
import logging
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from focusreport.api.report_run import router as report_router
from focusreport.utils.logging_config import setup_logging

load_dotenv()

setup_logging(level=logging.INFO)
logger = logging.getLogger("main")

app = FastAPI(title="Focus Report API")


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------
class RequestLogMiddleware(BaseHTTPMiddleware):
    """One line per request: method, path, status and elapsed milliseconds."""

    async def dispatch(self, request: Request, call_next):
        started = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s failed", request.method, request.url.path)
            raise
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info("%s %s -> %d (%.2fms)",
                    request.method, request.url.path, response.status_code, elapsed_ms)
        return response


app.add_middleware(RequestLogMiddleware)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


app.include_router(report_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
