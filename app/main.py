import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.v1.schedule import router as schedule_router
from app.application.exceptions import BookingValidationError
from app.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("date", "time", "action", "stage", "event_id", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logger = logging.getLogger(__name__)

app = FastAPI(title="Slot Scheduling Service", version="1.0.0")

app.include_router(schedule_router, tags=["schedule"])


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed body fields are a ValidationError (400), not 422."""
    logger.info("Rejected request body", extra={"action": request.url.path, "error": str(exc.errors())})
    return JSONResponse(
        status_code=BookingValidationError.status_code,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "error": {"type": BookingValidationError.error_type, "status": BookingValidationError.status_code},
        },
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
