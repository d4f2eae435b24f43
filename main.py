from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.core.config import settings
from app.database import get_db
from app.routers import rbac, mapping
from app.core.logging_config import logger

# Grant tables are created by Alembic (alembic upgrade head)

app = FastAPI(
    title="HR Master Data API",
    version="1.0.0",
    redirect_slashes=False
)

# Admin UI sends the bearer token from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(rbac.router, prefix="/api/rbac", tags=["RBAC"])
app.include_router(mapping.router, prefix="/api/mapping", tags=["Schema Mapping"])


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Liveness plus a round trip to the HR database"""
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unreachable"
        )
    return {"status": "healthy", "database": "connected"}
