from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from minibi.database import init_db
from minibi.exceptions import NotFoundError, ValidationError
from minibi.logging_config import configure_logging
from minibi.routers import blocks, dashboards, queries, templates

# Configure logging at startup
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_db()
    yield


app = FastAPI(title="Mini-BI", lifespan=lifespan)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})


# Routers
app.include_router(dashboards.router, prefix="/dashboards", tags=["dashboards"])
app.include_router(queries.router, prefix="/queries", tags=["queries"])
app.include_router(blocks.router, prefix="/blocks", tags=["blocks"])
app.include_router(templates.router, prefix="/templates", tags=["templates"])


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}
