import json
import logging
import re
import httpx
from typing import Any, Dict, List, Optional, Tuple

from config.settings import get_settings
from models.image_generation import EditRequest, GenerationRequest, SegmentationRequest
from services.prompt_builder import build_edit_prompt, build_segmentation_prompt

logger = logging.getLogger(__name__)

# ```json ... ``` wrapper the model sometimes puts around JSON answers
CODE_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class MissingApiKeyError(Exception):
    """Raised before any outbound call when no Gemini API key is available"""


class GeminiAPIError(Exception):
    """Upstream call failed or returned an unusable response"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GeminiService:
    def __init__(self, api_key: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        settings = get_settings()
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.model = settings.GEMINI_MODEL
        self.base_url = settings.GEMINI_API_BASE_URL.rstrip('/')
        self.timeout = settings.GEMINI_TIMEOUT_SECONDS
        self.mime_type = settings.IMAGE_MIME_TYPE
        self.transport = transport

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise MissingApiKeyError("GEMINI_API_KEY is not set in environment variables.")
        return self.api_key

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    # Content assembly

    def inline_image_part(self, data: str) -> Dict[str, Any]:
        return {"inlineData": {"mimeType": self.mime_type, "data": data}}

    def build_generation_parts(self, request: GenerationRequest) -> List[Dict[str, Any]]:
        """Prompt text first, then every reference image"""
        parts: List[Dict[str, Any]] = [{"text": request.prompt}]
        for image in request.reference_images or []:
            parts.append(self.inline_image_part(image))
        return parts

    def build_edit_parts(self, request: EditRequest) -> List[Dict[str, Any]]:
        """Edit prompt, original image, reference images, then the mask last"""
        has_mask = bool(request.mask_image)
        parts: List[Dict[str, Any]] = [
            {"text": build_edit_prompt(request.instruction, has_mask)},
            self.inline_image_part(request.original_image),
        ]
        for image in request.reference_images or []:
            parts.append(self.inline_image_part(image))
        if has_mask:
            parts.append(self.inline_image_part(request.mask_image))
        return parts

    def build_segmentation_parts(self, request: SegmentationRequest) -> List[Dict[str, Any]]:
        return [
            {"text": build_segmentation_prompt(request.query)},
            self.inline_image_part(request.image),
        ]

    @staticmethod
    def build_generation_config(
        temperature: Optional[float] = None,
        seed: Optional[int] = None,
        with_images: bool = False
    ) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        if with_images:
            config["responseModalities"] = ["TEXT", "IMAGE"]
        if temperature is not None:
            config["temperature"] = temperature
        if seed is not None:
            config["seed"] = seed
        return config

    # Upstream call

    async def generate_content(
        self,
        parts: List[Dict[str, Any]],
        generation_config: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Call models/{model}:generateContent with a single user turn.

        Args:
            parts: Ordered text / inlineData parts
            generation_config: Optional generationConfig block

        Returns:
            Decoded JSON response from the Gemini API

        Raises:
            MissingApiKeyError: No key configured (raised before any network call)
            GeminiAPIError: Non-2xx status, transport failure or non-JSON body
        """
        api_key = self._require_api_key()

        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        logger.debug("Calling %s with %d content parts", self.model, len(parts))

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    json=payload,
                    headers={
                        "x-goog-api-key": api_key,
                        "Content-Type": "application/json"
                    }
                )
        except httpx.TimeoutException as e:
            raise GeminiAPIError("Request timeout - Gemini API may be slow") from e
        except httpx.TransportError as e:
            raise GeminiAPIError(f"Network error contacting Gemini API: {str(e)}") from e

        if response.status_code != 200:
            raise GeminiAPIError(self._error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise GeminiAPIError("Gemini API returned a non-JSON response") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        fallback = f"API request failed: {response.status_code}"
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            return fallback
        error = error_data.get('error') if isinstance(error_data, dict) else None
        if isinstance(error, dict):
            return error.get('message') or fallback
        if isinstance(error, str) and error:
            return error
        return fallback

    # Response extraction

    @staticmethod
    def _first_candidate_parts(response: Dict[str, Any]) -> List[Dict[str, Any]]:
        candidates = response.get('candidates') or []
        if not candidates:
            block_reason = (response.get('promptFeedback') or {}).get('blockReason')
            if block_reason:
                raise GeminiAPIError(f"Request was blocked by Gemini API: {block_reason}")
            raise GeminiAPIError("No candidates returned from Gemini API")
        return (candidates[0].get('content') or {}).get('parts') or []

    @classmethod
    def extract_images(cls, response: Dict[str, Any]) -> List[str]:
        """Base64 data of every response part that carries inline data"""
        images = []
        for part in cls._first_candidate_parts(response):
            inline_data = part.get('inlineData') or part.get('inline_data')
            if inline_data and inline_data.get('data'):
                images.append(inline_data['data'])
        return images

    @classmethod
    def extract_text(cls, response: Dict[str, Any]) -> str:
        for part in cls._first_candidate_parts(response):
            if isinstance(part.get('text'), str):
                return part['text']
        raise GeminiAPIError("No text returned from Gemini API")

    # Operations

    async def generate_images(self, request: GenerationRequest) -> List[str]:
        """Text-to-image generation, optionally guided by reference images"""
        response = await self.generate_content(
            self.build_generation_parts(request),
            self.build_generation_config(request.temperature, request.seed, with_images=True)
        )
        return self.extract_images(response)

    async def edit_image(self, request: EditRequest) -> List[str]:
        """Instruction-guided edit of the original image, confined by the mask if present"""
        response = await self.generate_content(
            self.build_edit_parts(request),
            self.build_generation_config(request.temperature, request.seed, with_images=True)
        )
        return self.extract_images(response)

    async def segment_image(self, request: SegmentationRequest) -> str:
        """Returns the model's raw text answer; see parse_segmentation_text"""
        response = await self.generate_content(self.build_segmentation_parts(request))
        return self.extract_text(response)

    async def validate_api_key(self, api_key: str) -> Tuple[bool, Optional[str]]:
        """
        Check a key with a trivial call (metadata lookup of the configured model).

        Returns:
            (valid, error_message)
        """
        if not api_key or not api_key.strip():
            return False, "API key is empty"

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/models/{self.model}",
                    headers={"x-goog-api-key": api_key.strip()}
                )
        except httpx.TimeoutException:
            return False, "Request timeout - Gemini API may be slow"
        except httpx.TransportError as e:
            return False, f"Network error contacting Gemini API: {str(e)}"

        if response.status_code == 200:
            return True, None
        return False, self._error_message(response)


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_segmentation_text(text: str) -> Tuple[bool, Any]:
    """
    Try to decode the model's segmentation answer as JSON.

    A surrounding Markdown code fence is removed first. NaN and Infinity are
    not JSON and make the text count as raw.

    Returns:
        (True, parsed_value) when the text is JSON, otherwise (False, text)
    """
    candidate = text
    match = CODE_FENCE_PATTERN.match(text)
    if match:
        candidate = match.group(1)
    try:
        return True, json.loads(candidate, parse_constant=_reject_constant)
    except (TypeError, ValueError):
        return False, text
