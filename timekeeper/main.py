from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import os
import logging
from timekeeper.core.config import settings
from timekeeper.core.database import engine, Base
from timekeeper.core.redis_service import redis_service
from timekeeper.core.error_handlers import register_error_handlers
from timekeeper.core.logging_config import setup_logging
from timekeeper.core.middleware import add_middleware
from timekeeper.auth.routes import router as auth_router
from timekeeper.companies.routes import router as companies_router
from timekeeper.employees.routes import router as employees_router
from timekeeper.attendance.routes import router as attendance_router
from timekeeper.vacations.routes import router as vacations_router
from timekeeper.extra_hours.routes import router as extra_hours_router
from timekeeper.schedule_changes.routes import router as schedule_changes_router
from timekeeper.payrolls.routes import router as payrolls_router
from timekeeper.notifications.routes import router as notifications_router
from timekeeper.exports.routes import router as exports_router
from timekeeper.holidays.routes import router as holidays_router
from timekeeper.functions.routes import router as functions_router

setup_logging(settings.log_level, settings.log_file)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Multi-tenant HR and time-tracking service: attendance, vacations, extra hours, payroll",
    version="1.0.0",
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
add_middleware(app)

for router in (
    auth_router,
    companies_router,
    employees_router,
    attendance_router,
    vacations_router,
    extra_hours_router,
    schedule_changes_router,
    payrolls_router,
    notifications_router,
    exports_router,
    holidays_router,
    functions_router,
):
    app.include_router(router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Create tables and the upload directory."""
    # Every model module is imported through its routes above
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    os.makedirs(os.path.join(settings.upload_dir, "payroll"), exist_ok=True)

    if settings.enable_redis_cache and not redis_service.is_available():
        logger.warning("Redis not available, polling endpoints will hit the database")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down...")


@app.get("/")
async def root():
    return {
        "message": f"{settings.app_name} API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "auth": "/api/v1/auth",
            "companies": "/api/v1/companies",
            "employees": "/api/v1/employees",
            "attendance": "/api/v1/attendance",
            "vacations": "/api/v1/vacations",
            "extra_hours": "/api/v1/extra-hours",
            "schedule_changes": "/api/v1/schedule-changes",
            "payrolls": "/api/v1/payrolls",
            "notifications": "/api/v1/notifications",
            "exports": "/api/v1/exports",
            "holidays": "/api/v1/holidays",
            "functions": "/api/v1/functions"
        }
    }


@app.get("/health")
async def health_check():
    """Report database and cache health."""
    database = "healthy"
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "database": database,
        "cache": redis_service.health_check()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "timekeeper.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
