"""Main FastAPI application for the pet-food catalog entry services"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from petfood_catalog.api.endpoints import duplicates, ingredients
from petfood_catalog.config import get_settings
from petfood_catalog.database import init_db
import logging

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Pet Food Catalog API",
    description="Duplicate detection and ingredient processing for pet-food catalog data entry",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers with /api prefix
app.include_router(duplicates.router, prefix="/api", tags=["Duplicates"])
app.include_router(ingredients.router, prefix="/api", tags=["Ingredients"])


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    logger.info("Initializing database...")
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
