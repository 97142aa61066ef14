import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slot_booking.api.cancellations import router as cancellations_router
from slot_booking.api.v1.sessions import router as sessions_router
from slot_booking.application.exceptions import InvalidTransitionError
from slot_booking.core.config import settings
from slot_booking.wiring.dependencies import shutdown_dependencies


LOG_CONTEXT_KEYS = ("session_id", "status", "date", "service", "slot_start", "error_kind", "reason")


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in LOG_CONTEXT_KEYS:
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


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown_dependencies()


app = FastAPI(title="Appointment Booking", version="1.0.0", lifespan=lifespan)

app.include_router(sessions_router, tags=["sessions"])
app.include_router(cancellations_router, tags=["cancellations"])


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
