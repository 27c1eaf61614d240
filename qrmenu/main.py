# qrmenu/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qrmenu.config import settings
from qrmenu.db import Base, engine
from qrmenu.errors import register_exception_handlers
from qrmenu.middleware import RequestIdMiddleware
import qrmenu.models  # noqa: F401  (registers tables)

from qrmenu.routers import admin, auth, billing, financials, tenant, tenants, users
from qrmenu.routers import settings as settings_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="QR Menu API", version="1.0.0")

@app.on_event("startup")
def init_db():
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready (%s)", settings.APP_ENV)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(billing.router)
app.include_router(tenants.router)
app.include_router(financials.router)
app.include_router(settings_router.router)
app.include_router(users.router)
app.include_router(tenant.router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
