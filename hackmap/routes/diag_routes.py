# hackmap/routes/diag_routes.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hackmap.config import config_diag_safe
from hackmap.data_client.database import Database
from hackmap.email_client.mailer import Mailer
from hackmap.dependencies import get_database, get_mailer
from hackmap.utils import utcnow

logger = logging.getLogger("hackmap")
router = APIRouter(tags=["diag"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/api/health/db")
def health_db(database: Database = Depends(get_database)):
    timestamp = utcnow().isoformat() + "Z"
    if database.check_connection():
        return {"status": "healthy", "timestamp": timestamp, "database": "connected"}
    logger.warning("Health check: database disconnected")
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "timestamp": timestamp, "database": "disconnected"},
    )


@router.get("/api/diag/config")
def diag_config():
    return config_diag_safe()


@router.get("/api/health/mail")
def health_mail(mailer: Mailer = Depends(get_mailer)):
    timestamp = utcnow().isoformat() + "Z"
    if mailer.verify():
        return {"status": "healthy", "timestamp": timestamp, "provider": mailer.provider}
    logger.warning("Health check: mail transport unreachable")
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "timestamp": timestamp, "provider": mailer.provider},
    )
