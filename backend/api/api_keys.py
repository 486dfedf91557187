import logging
from fastapi import APIRouter

from api.generation import get_gemini_service
from models.image_generation import ApiKeyValidationRequest, ApiKeyValidationResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["api-keys"])

@router.post("/validate-key", response_model=ApiKeyValidationResponse)
async def validate_api_key(request: ApiKeyValidationRequest):
    """Check a user-supplied Gemini API key with a trivial upstream call"""
    try:
        gemini_service = get_gemini_service()
        valid, error = await gemini_service.validate_api_key(request.api_key)

        if not valid:
            logger.info("API key validation failed: %s", error)

        return ApiKeyValidationResponse(valid=valid, error=error)

    except Exception as e:
        logger.exception("Error in /api/validate-key")
        return ApiKeyValidationResponse(
            valid=False,
            error=f"Server error: {str(e)}"
        )

@router.get("/health")
async def check_gemini_config():
    """Check if a server-side Gemini API key is configured"""
    gemini_service = get_gemini_service()
    has_key = bool(gemini_service.api_key)

    return {
        "status": "healthy",
        "service": "api",
        "configured": has_key,
        "model": gemini_service.model,
        "message": "Gemini API key configured" if has_key else "Gemini API key not set"
    }
