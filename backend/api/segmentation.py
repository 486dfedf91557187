import logging
from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import Optional

from api.generation import error_response, get_gemini_service
from models.image_generation import ErrorResponse, SegmentationRequest, SegmentationResult
from services.gemini_service import parse_segmentation_text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["segmentation"])

@router.post(
    "/segment",
    responses={
        200: {
            "model": SegmentationResult,
            "description": "Model answer parsed as JSON, or the raw text as text/plain when it is not JSON",
            "content": {"text/plain": {"schema": {"type": "string"}}}
        },
        500: {"model": ErrorResponse}
    }
)
async def segment_image(
    request: SegmentationRequest,
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key")
):
    """Ask the model for segmentation masks matching the query"""
    try:
        gemini_service = get_gemini_service(x_api_key)
        response_text = await gemini_service.segment_image(request)

    except Exception as e:
        logger.exception("Error in /api/segment")
        return error_response(e)

    is_json, value = parse_segmentation_text(response_text)
    if is_json:
        return JSONResponse(status_code=200, content=value)

    logger.warning("Segmentation answer is not JSON, returning raw text (%d chars)", len(response_text))
    return PlainTextResponse(status_code=200, content=response_text)
