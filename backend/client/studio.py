import logging
from typing import Optional, Tuple

from client.errors import classify_error
from client.image_client import ImageClient
from client.image_utils import (
    generate_id,
    image_size,
    is_data_url,
    make_asset,
    now_ms,
    render_mask,
    strip_data_url,
)
from client.store import AppStore
from config.settings import get_settings
from models.history import Edit, Generation, GenerationParameters
from models.image_generation import EditRequest, GenerationRequest

logger = logging.getLogger(__name__)

class ImageStudio:
    """
    Generate and edit workflows on top of the image client and the store.

    Every action clears the previous error, marks the store as generating for
    the duration of the call, and reports failures through the store's error
    field and the returned (success, record, error) tuple.
    """

    def __init__(self, store: AppStore, client: Optional[ImageClient] = None, model_version: Optional[str] = None):
        self.store = store
        self.client = client or ImageClient()
        self.model_version = model_version or get_settings().GEMINI_MODEL
        if store.state.api_key:
            self.client.set_api_key(store.state.api_key)

    def _fail(self, action: str, error: Exception) -> Tuple[bool, None, str]:
        classified = classify_error(error)
        logger.error("%s failed (%s): %s", action, classified.kind.value, classified.message)
        self.store.set_error(classified.user_message)
        return False, None, classified.user_message

    def _empty(self, action: str) -> Tuple[bool, None, str]:
        message = f"{action} returned no images."
        logger.warning(message)
        self.store.set_error(message)
        return False, None, message

    async def generate(self, request: GenerationRequest) -> Tuple[bool, Optional[Generation], Optional[str]]:
        """Run a text-to-image generation and record it in the project history"""
        self.store.set_is_generating(True)
        self.store.set_error(None)
        try:
            images = await self.client.generate_image(request)
        except Exception as e:
            return self._fail("Generation", e)
        finally:
            self.store.set_is_generating(False)

        if not images:
            return self._empty("Generation")

        output_assets = [make_asset(data, "output") for data in images]
        source_assets = [make_asset(data, "original") for data in request.reference_images or []]

        generation = Generation(
            id=generate_id(),
            prompt=request.prompt,
            parameters=GenerationParameters(seed=request.seed, temperature=request.temperature),
            source_assets=source_assets,
            output_assets=output_assets,
            model_version=self.model_version,
            timestamp=now_ms()
        )

        self.store.add_generation(generation)
        self.store.set_canvas_image(output_assets[0].url)
        logger.info("Generation %s produced %d image(s)", generation.id, len(output_assets))
        return True, generation, None

    def build_edit_request(self, instruction: str) -> EditRequest:
        """
        Assemble an EditRequest from the current canvas, reference images and brush strokes.

        Raises:
            ValueError: No image on the canvas
        """
        state = self.store.state
        if not state.canvas_image:
            raise ValueError("No image to edit")

        original_image = strip_data_url(state.canvas_image)
        reference_images = [
            strip_data_url(img) for img in state.edit_reference_images if is_data_url(img)
        ]

        mask_image = None
        if state.brush_strokes:
            width, height = image_size(original_image)
            mask_image = render_mask(state.brush_strokes, width, height)

        return EditRequest(
            instruction=instruction,
            original_image=original_image,
            reference_images=reference_images or None,
            mask_image=mask_image,
            temperature=state.temperature,
            seed=state.seed
        )

    async def edit(self, instruction: str) -> Tuple[bool, Optional[Edit], Optional[str]]:
        """Edit the canvas image and record the result against its parent generation"""
        try:
            request = self.build_edit_request(instruction)
        except ValueError as e:
            self.store.set_error(str(e))
            return False, None, str(e)

        self.store.set_is_generating(True)
        self.store.set_error(None)
        try:
            images = await self.client.edit_image(request)
        except Exception as e:
            return self._fail("Edit", e)
        finally:
            self.store.set_is_generating(False)

        if not images:
            return self._empty("Edit")

        state = self.store.state
        output_assets = [make_asset(data, "output") for data in images]

        edit = Edit(
            id=generate_id(),
            parent_generation_id=state.selected_generation_id or self.store.latest_generation_id() or "",
            mask_asset_id=generate_id() if request.mask_image else None,
            instruction=instruction,
            output_assets=output_assets,
            timestamp=now_ms()
        )

        self.store.add_edit(edit)
        self.store.set_canvas_image(output_assets[0].url)
        self.store.select_edit(edit.id)
        self.store.select_generation(None)
        logger.info("Edit %s produced %d image(s)", edit.id, len(output_assets))
        return True, edit, None

    async def save_api_key(self, api_key: str) -> Tuple[bool, Optional[str]]:
        """
        Validate and store a user-supplied key.

        An empty key clears the stored one so the server key is used again. When
        validation itself cannot be performed the key is saved anyway.

        Returns:
            (saved, error_message)
        """
        trimmed = api_key.strip()
        if not trimmed:
            self.store.set_api_key(None)
            self.client.set_api_key(None)
            return True, None

        try:
            valid, error = await self.client.validate_api_key(trimmed)
        except Exception as e:
            classified = classify_error(e)
            logger.warning("Unable to validate API key, saving anyway: %s", classified.message)
            valid, error = True, None

        if not valid:
            return False, classify_error(Exception(error or "API key not valid")).user_message

        self.store.set_api_key(trimmed)
        self.client.set_api_key(trimmed)
        return True, None
