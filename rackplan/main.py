import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rackplan.lib.config import settings
from rackplan.lib.errors import AppError
from rackplan.features.health.routes import router as health_router
from rackplan.features.floor_plans.routes import router as floor_plans_router
from rackplan.features.racks.routes import router as racks_router
from rackplan.features.elements.routes import router as elements_router
from rackplan.features.equipment.routes import router as equipment_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    elif exc.status_code == 409:
        logger.warning("%s %s conflict: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app = FastAPI(
    title="Rack Plan API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["Health"])
app.include_router(floor_plans_router, prefix="/api", tags=["Floor Plans"])
app.include_router(racks_router, prefix="/api", tags=["Racks"])
app.include_router(elements_router, prefix="/api", tags=["Elements"])
app.include_router(equipment_router, prefix="/api", tags=["Equipment"])


@app.get("/")
async def root():
    return {"message": "Rack Plan API", "docs": "/docs"}
