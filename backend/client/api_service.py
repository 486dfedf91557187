import logging
import httpx
from typing import Any, Dict, Optional, Union

from client.errors import ApiError

logger = logging.getLogger(__name__)

class ApiService:
    """JSON POST helper for the proxy endpoints"""

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        api_key: Optional[str] = None,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    async def post(self, endpoint: str, body: Dict[str, Any]) -> Union[Dict[str, Any], list, str]:
        """
        POST a JSON body to an endpoint.

        Args:
            endpoint: Path such as "/api/generate"
            body: JSON-serializable request body

        Returns:
            Parsed JSON body, or the raw text for text/plain responses

        Raises:
            ApiError: Non-2xx status (with the server's error message) or network failure
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport
            ) as client:
                response = await client.post(endpoint, json=body, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.error("API timeout on %s: %s", endpoint, e)
            raise ApiError(f"Request timeout on {endpoint}") from e
        except httpx.TransportError as e:
            logger.error("API network error on %s: %s", endpoint, e)
            raise ApiError(f"Network error on {endpoint}: {str(e)}") from e

        if not response.is_success:
            message = self._error_message(response)
            logger.error("API error on %s: %s", endpoint, message)
            raise ApiError(message, response.status_code)

        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            return response.json()
        return response.text

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        fallback = f"HTTP error! status: {response.status_code}"
        try:
            data = response.json()
        except ValueError:
            return response.text or fallback
        if isinstance(data, dict):
            error = data.get("error") or data.get("detail")
            if error:
                return error if isinstance(error, str) else str(error)
        return fallback
