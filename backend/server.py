from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
import logging

from config import CORS_ORIGINS, LOG_LEVEL
from database import client, create_indexes
from routers import hierarchy_router, reports_router, analytics_router
from services.errors import (
    UserNotFoundError,
    StoreUnavailableError,
    HierarchyValidationError,
)

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create the main app
app = FastAPI(title="Wellness Hierarchy API", version="1.0.0")


@app.exception_handler(UserNotFoundError)
async def user_not_found_handler(request: Request, exc: UserNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Data is temporarily unavailable. Please retry.", "retry": True}
    )


@app.exception_handler(HierarchyValidationError)
async def hierarchy_validation_handler(request: Request, exc: HierarchyValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}


app.include_router(hierarchy_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_db_client():
    await create_indexes()


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()
