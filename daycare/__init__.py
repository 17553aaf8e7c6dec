# daycare/__init__.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from daycare.core.config import settings
from daycare.core.database import close_db, init_db
from daycare.core.exceptions import DaycareError, InternalError, ValidationError
from daycare.core.logging import logger
from daycare.middleware import RequestIDMiddleware
from daycare.routes import activities, calendar, children, finance, inventory, messages, progress, reports, users


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DaycareError)
    async def daycare_error_handler(request: Request, exc: DaycareError):
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(item["loc"]), "msg": item["msg"], "type": item["type"]}
            for item in exc.errors()
        ]
        error = ValidationError("Invalid request", details={"errors": errors})
        return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {str(exc)}",
            exc_info=True,
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="API for running a daycare: children, activities, finance, messaging and reporting",
        version=settings.VERSION,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
    app.include_router(children.router, prefix="/api/v1/children", tags=["Children"])
    app.include_router(activities.router, prefix="/api/v1/activities", tags=["Activities"])
    app.include_router(finance.router, prefix="/api/v1/finance", tags=["Finance"])
    app.include_router(messages.router, prefix="/api/v1/messages", tags=["Messages"])
    app.include_router(calendar.router, prefix="/api/v1/calendar", tags=["Calendar"])
    app.include_router(inventory.router, prefix="/api/v1/inventory", tags=["Inventory"])
    app.include_router(progress.router, prefix="/api/v1/progress-reports", tags=["Progress Reports"])
    app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])

    @app.on_event("startup")
    async def startup_event():
        await init_db()
        logger.info("Application startup completed")

    @app.on_event("shutdown")
    async def shutdown_event():
        await close_db()
        logger.info("Application shutdown completed")

    return app
