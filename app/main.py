import logging
from fastapi import FastAPI
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.database import Base, engine, check_db_connection
from app.api.v1.routes.groups import router as groups_router
from app.api.v1.routes.expenses import router as expenses_router
from app.api.v1.routes.balances import router as balances_router

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

if not check_db_connection():
    logger.warning("Database is not reachable at startup")

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Travel Group Expenses",
    description="Shared expenses, splits and balances for travel groups",
    version="1.0.0"
)

app.include_router(groups_router)
app.include_router(expenses_router)
app.include_router(balances_router)

logger.info("Travel group expense service ready")


@app.get("/")
def read_root():
    return {"message": "Travel Group Expenses API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
