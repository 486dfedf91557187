import logging
from typing import Any, List, Optional, Tuple, Union

from client.api_service import ApiService
from client.errors import ApiError
from models.image_generation import EditRequest, GenerationRequest, SegmentationRequest

logger = logging.getLogger(__name__)

class ImageClient:
    """Calls the generate / edit / segment endpoints and unwraps their responses"""

    def __init__(self, api_service: Optional[ApiService] = None):
        self.api_service = api_service or ApiService()

    def set_api_key(self, api_key: Optional[str]) -> None:
        self.api_service.api_key = api_key

    @staticmethod
    def _body(request) -> dict:
        return request.model_dump(by_alias=True, exclude_none=True)

    async def _images(self, endpoint: str, request) -> List[str]:
        response = await self.api_service.post(endpoint, self._body(request))
        if not isinstance(response, dict) or not isinstance(response.get("images"), list):
            raise ApiError(f"Unexpected response from {endpoint}")
        return response["images"]

    async def generate_image(self, request: GenerationRequest) -> List[str]:
        """Returns base64 PNG strings"""
        return await self._images("/api/generate", request)

    async def edit_image(self, request: EditRequest) -> List[str]:
        """Returns base64 PNG strings"""
        return await self._images("/api/edit", request)

    async def segment_image(self, request: SegmentationRequest) -> Union[Any, str]:
        """Parsed segmentation JSON, or the model's raw text when it was not JSON"""
        return await self.api_service.post("/api/segment", self._body(request))

    async def validate_api_key(self, api_key: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a key through the proxy.

        Returns:
            (valid, error_message)
        """
        response = await self.api_service.post("/api/validate-key", {"apiKey": api_key})
        if not isinstance(response, dict):
            raise ApiError("Unexpected response from /api/validate-key")
        return bool(response.get("valid")), response.get("error")
