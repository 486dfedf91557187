import logging
from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse
from typing import Optional

from models.image_generation import EditRequest, ErrorResponse, GenerationRequest, ImagesResponse
from services.gemini_service import GeminiService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])

def get_gemini_service(api_key: Optional[str] = None):
    return GeminiService(api_key=api_key)

def error_response(error: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(error)})

@router.post(
    "/generate",
    response_model=ImagesResponse,
    responses={500: {"model": ErrorResponse}}
)
async def generate_image(
    request: GenerationRequest,
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key")
):
    """Generate images from a prompt and optional reference images"""
    try:
        gemini_service = get_gemini_service(x_api_key)
        images = await gemini_service.generate_images(request)
        logger.info("Generated %d image(s) from %d reference image(s)",
                    len(images), len(request.reference_images or []))
        return ImagesResponse(images=images)

    except Exception as e:
        logger.exception("Error in /api/generate")
        return error_response(e)

@router.post(
    "/edit",
    response_model=ImagesResponse,
    responses={500: {"model": ErrorResponse}}
)
async def edit_image(
    request: EditRequest,
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key")
):
    """Edit the original image following the instruction, confined to the mask when given"""
    try:
        gemini_service = get_gemini_service(x_api_key)
        images = await gemini_service.edit_image(request)
        logger.info("Edit returned %d image(s) (mask: %s)", len(images), bool(request.mask_image))
        return ImagesResponse(images=images)

    except Exception as e:
        logger.exception("Error in /api/edit")
        return error_response(e)
