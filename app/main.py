import logging

from fastapi import FastAPI
from app.core.config import settings
from app.api.routes import plans, staff, weekly_rules, calendars

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Shift Calendar API", version="0.1.0")

app.include_router(plans.router, prefix=settings.API_PREFIX)
app.include_router(staff.router, prefix=settings.API_PREFIX)
app.include_router(weekly_rules.router, prefix=settings.API_PREFIX)
app.include_router(calendars.router, prefix=settings.API_PREFIX)


@app.get("/health")
def health_check():
    return {"status": "ok"}
