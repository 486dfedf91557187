import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import api_keys, generation, segmentation
from config.settings import get_settings
from core.log_config import configure_logging

# Real environment variables win over .env values
load_dotenv()

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    # Operation endpoints are POST only; other methods get {"error": ...} like the failures do
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method Not Allowed"}, headers=exc.headers)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

# Include API routers
app.include_router(generation.router, prefix=settings.API_PREFIX)
app.include_router(segmentation.router, prefix=settings.API_PREFIX)
app.include_router(api_keys.router, prefix=settings.API_PREFIX)

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# API paths that accept no GET; collected before the frontend catch-all is registered
POST_ONLY_PATHS = {
    route.path for route in app.routes
    if isinstance(route, APIRoute) and "GET" not in route.methods
}

frontend_dir = Path(settings.FRONTEND_DIST_DIR).resolve()
frontend_exists = (frontend_dir / "index.html").is_file()

if frontend_exists:
    logger.info("Frontend build found, serving static files from: %s", frontend_dir)

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        """Serve built frontend files, falling back to index.html for client-side routes"""
        if f"/{full_path}" in POST_ONLY_PATHS:
            raise HTTPException(status_code=405, headers={"Allow": "POST"})
        if full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")

        candidate = (frontend_dir / full_path).resolve()
        if full_path and candidate.is_file() and frontend_dir in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(frontend_dir / "index.html")
else:
    logger.warning("Frontend build not found at %s. API-only mode enabled.", frontend_dir)

    @app.get("/")
    async def root():
        return {"message": f"{settings.PROJECT_NAME} API is running", "mode": "api-only"}

if __name__ == "__main__":
    import uvicorn
    logger.info("Backend server listening on http://%s:%s", settings.HOST, settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
