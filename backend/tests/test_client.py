"""
Client adapter tests

ImageClient talks to the real FastAPI app through httpx.ASGITransport; the
Gemini service methods are patched so nothing leaves the process.
"""
import httpx
import pytest
from unittest.mock import patch

from client.api_service import ApiService
from client.errors import ApiError, ErrorKind, classify_error
from client.image_client import ImageClient
from models.image_generation import EditRequest, GenerationRequest, SegmentationRequest
from services.gemini_service import GeminiAPIError


@pytest.fixture
def image_client():
    from main import app
    return ImageClient(ApiService(base_url="http://testserver", transport=httpx.ASGITransport(app=app)))


@pytest.mark.integration
@pytest.mark.asyncio
class TestImageClient:
    """Round trips through the proxy endpoints"""

    async def test_generate_image(self, image_client):
        with patch('services.gemini_service.GeminiService.generate_images') as mock_generate:
            mock_generate.return_value = ["b64-out"]

            images = await image_client.generate_image(GenerationRequest(prompt="a cat", seed=1))

        assert images == ["b64-out"]
        sent = mock_generate.call_args.args[0]
        assert sent.prompt == "a cat"
        assert sent.seed == 1

    async def test_edit_image_sends_camel_case(self, image_client):
        with patch('services.gemini_service.GeminiService.edit_image') as mock_edit:
            mock_edit.return_value = ["edited"]

            images = await image_client.edit_image(EditRequest(
                instruction="x", original_image="orig", mask_image="mask", reference_images=["r"]
            ))

        assert images == ["edited"]
        sent = mock_edit.call_args.args[0]
        assert sent.original_image == "orig"
        assert sent.mask_image == "mask"
        assert sent.reference_images == ["r"]

    async def test_segment_image_json(self, image_client):
        with patch('services.gemini_service.GeminiService.segment_image') as mock_segment:
            mock_segment.return_value = '{"masks": []}'

            result = await image_client.segment_image(SegmentationRequest(image="i", query="q"))

        assert result == {"masks": []}

    async def test_segment_image_text(self, image_client):
        with patch('services.gemini_service.GeminiService.segment_image') as mock_segment:
            mock_segment.return_value = "no such object"

            result = await image_client.segment_image(SegmentationRequest(image="i", query="q"))

        assert result == "no such object"

    async def test_server_error_raises_api_error(self, image_client):
        with patch('services.gemini_service.GeminiService.generate_images') as mock_generate:
            mock_generate.side_effect = GeminiAPIError("API key not valid. Please pass a valid API key.", 400)

            with pytest.raises(ApiError) as exc_info:
                await image_client.generate_image(GenerationRequest(prompt="x"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "API key not valid. Please pass a valid API key."
        assert classify_error(exc_info.value).kind is ErrorKind.INVALID_API_KEY

    async def test_missing_server_key(self, image_client):
        with pytest.raises(ApiError) as exc_info:
            await image_client.generate_image(GenerationRequest(prompt="x"))

        assert "GEMINI_API_KEY" in exc_info.value.message
        assert classify_error(exc_info.value).kind is ErrorKind.INVALID_API_KEY

    async def test_validate_api_key(self, image_client):
        with patch('services.gemini_service.GeminiService.validate_api_key') as mock_validate:
            mock_validate.return_value = (False, "API key not valid.")

            valid, error = await image_client.validate_api_key("bad")

        assert valid is False
        assert error == "API key not valid."


@pytest.mark.unit
@pytest.mark.asyncio
class TestApiService:
    """Tests for the JSON POST helper in isolation"""

    async def test_api_key_header(self, recording_transport):
        transport = recording_transport(json_body={"images": []})
        service = ApiService(api_key="user-key", transport=transport)

        await service.post("/api/generate", {"prompt": "x"})

        assert transport.requests[0].headers["X-Api-Key"] == "user-key"

    async def test_no_api_key_header_by_default(self, recording_transport):
        transport = recording_transport(json_body={"images": []})
        service = ApiService(transport=transport)

        await service.post("/api/generate", {"prompt": "x"})

        assert "X-Api-Key" not in transport.requests[0].headers

    async def test_network_error(self):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = ApiService(transport=httpx.MockTransport(fail))

        with pytest.raises(ApiError) as exc_info:
            await service.post("/api/generate", {"prompt": "x"})

        assert exc_info.value.status_code is None
        assert classify_error(exc_info.value).kind is ErrorKind.NETWORK_ERROR

    async def test_error_without_json_body(self):
        service = ApiService(transport=httpx.MockTransport(lambda request: httpx.Response(502)))

        with pytest.raises(ApiError, match="HTTP error! status: 502"):
            await service.post("/api/edit", {})

    async def test_unexpected_images_payload(self, recording_transport):
        client = ImageClient(ApiService(transport=recording_transport(json_body={"unexpected": True})))

        with pytest.raises(ApiError, match="Unexpected response"):
            await client.generate_image(GenerationRequest(prompt="x"))


@pytest.mark.unit
class TestClassifyError:
    """Tests for the display classification heuristic"""

    @pytest.mark.parametrize("error,kind", [
        (ApiError("API key not valid. Please pass a valid API key.", 500), ErrorKind.INVALID_API_KEY),
        (ApiError("GEMINI_API_KEY is not set in environment variables.", 500), ErrorKind.INVALID_API_KEY),
        (ApiError("Permission denied", 500), ErrorKind.INVALID_API_KEY),
        (ApiError("Forbidden", 403), ErrorKind.INVALID_API_KEY),
        (ApiError("Resource has been exhausted (e.g. check quota).", 500), ErrorKind.QUOTA_EXCEEDED),
        (ApiError("Too Many Requests", 429), ErrorKind.QUOTA_EXCEEDED),
        (ApiError("Network error on /api/generate: refused"), ErrorKind.NETWORK_ERROR),
        (ApiError("Request timeout - Gemini API may be slow", 500), ErrorKind.NETWORK_ERROR),
        (ApiError("something odd"), ErrorKind.NETWORK_ERROR),
        (ApiError("Request contains an invalid argument.", 500), ErrorKind.INVALID_REQUEST),
        (ApiError("Request was blocked by Gemini API: SAFETY", 500), ErrorKind.INVALID_REQUEST),
        (ApiError("weird", 400), ErrorKind.INVALID_REQUEST),
        (ApiError("No candidates returned from Gemini API", 500), ErrorKind.UNKNOWN),
        (ValueError("boom"), ErrorKind.UNKNOWN),
    ])
    def test_classification(self, error, kind):
        assert classify_error(error).kind is kind

    def test_transport_error_is_network(self):
        assert classify_error(httpx.ConnectTimeout("slow")).kind is ErrorKind.NETWORK_ERROR

    def test_user_message_and_raw_message(self):
        classified = classify_error(ApiError("Quota exceeded for requests", 500))

        assert classified.message == "Quota exceeded for requests"
        assert "quota" in classified.user_message.lower()
