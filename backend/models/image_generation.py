from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationRequest(CamelModel):
    prompt: str
    reference_images: Optional[List[str]] = None  # Base64 encoded PNGs
    temperature: Optional[float] = None
    seed: Optional[int] = None


class EditRequest(CamelModel):
    instruction: str
    original_image: str  # Base64 encoded PNG
    reference_images: Optional[List[str]] = None
    mask_image: Optional[str] = None  # White pixels mark the editable region
    temperature: Optional[float] = None
    seed: Optional[int] = None


class SegmentationRequest(CamelModel):
    image: str  # Base64 encoded PNG
    query: str  # e.g. "the red car" or "the object at pixel (120, 48)"


class ImagesResponse(BaseModel):
    images: List[str] = []


class ErrorResponse(BaseModel):
    error: str


class SegmentationMask(BaseModel):
    """One entry of the JSON shape the model is asked to return"""
    label: str
    box_2d: List[float] = Field(..., min_length=4, max_length=4, description="[x, y, width, height]")
    mask: str = Field(..., description="Base64 encoded binary PNG mask")


class SegmentationResult(BaseModel):
    masks: List[SegmentationMask] = []


class ApiKeyValidationRequest(CamelModel):
    api_key: str


class ApiKeyValidationResponse(BaseModel):
    valid: bool
    error: Optional[str] = None
