# backend/app/main.py

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .middleware.rate_limit import rate_limit_middleware
from .redis_client import redis_client
from .routers import bookings, businesses, services, slots
from .services.errors import BookingError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Slotbook Booking API")

# ===== Middleware =====
app.middleware("http")(rate_limit_middleware)

# ===== Routers =====
app.include_router(businesses.router)
app.include_router(services.router)
app.include_router(slots.router)
app.include_router(bookings.router)


# ===== Errors =====
@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# ===== Health =====
@app.get("/health")
def health(db: Session = Depends(get_db)):
    """Database must answer; Redis is reported but optional."""
    db.execute(text("SELECT 1"))

    try:
        redis_ok = bool(redis_client.ping())
    except Exception:
        redis_ok = False

    return {"status": "ok", "database": True, "redis": redis_ok}
