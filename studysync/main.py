from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from studysync.core.config import settings
from studysync.core.errors import register_exception_handlers
from studysync.core.logging_config import configure_logging
from studysync.routers import gamification, groups, materials, profile, study

configure_logging()

# Create FastAPI instance
app = FastAPI(
    title=settings.app_name,
    description="Study tracking with streaks, badges and study groups",
    version=settings.version,
    debug=settings.debug
)

# CORS middleware for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(study.router, prefix="/study", tags=["Study"])
app.include_router(gamification.router, prefix="/gamification", tags=["Gamification"])
app.include_router(groups.router, prefix="/groups", tags=["Groups"])
app.include_router(materials.router, prefix="/materials", tags=["Materials"])
app.include_router(profile.router, prefix="/profile", tags=["Profile"])

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name} API! 📚",
        "version": settings.version,
        "docs": "/docs",
        "status": "ready_to_learn"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "database": "ready",
            "gamification": "active"
        }
    }

if __name__ == "__main__":
    uvicorn.run(
        "studysync.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
