import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import health
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging, get_logger
from app.core.monitoring import configure_error_monitoring
from app.core.observability import configure_observability
from app.db.session import Base, engine
from app.domains.clock.router import router as clock_router
from app.domains.pay_periods.router import router as pay_period_router
from app.domains.timesheets.router import router as timesheet_router

configure_logging(settings.log_level)
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(health.router)
app.include_router(pay_period_router)
app.include_router(timesheet_router)
app.include_router(clock_router)


@app.on_event("startup")
def startup_event() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("startup_complete", env=settings.env, anchor=settings.pay_period_anchor.isoformat())


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Timesheet API running", "environment": settings.env}


def run(host: str = "0.0.0.0", port: int = 8000) -> None:
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    run()
