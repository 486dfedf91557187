from pydantic import Field
from typing import Optional, List, Literal

from models.image_generation import CamelModel

AssetType = Literal['original', 'output']

class Asset(CamelModel):
    """An image held by the client, stored as a data URI"""
    id: str
    type: AssetType
    url: str = Field(..., description="data:<mime>;base64,<payload>")
    mime: str = "image/png"
    width: int
    height: int
    checksum: str = Field(..., description="First 32 characters of the base64 payload (not an integrity hash)")


class GenerationParameters(CamelModel):
    aspect_ratio: str = "1:1"
    seed: Optional[int] = None
    temperature: Optional[float] = None


class Generation(CamelModel):
    """Record of a single text-to-image call"""
    id: str
    prompt: str
    parameters: GenerationParameters = Field(default_factory=GenerationParameters)
    source_assets: List[Asset] = []
    output_assets: List[Asset] = []
    model_version: str
    timestamp: int = Field(..., description="Milliseconds since the epoch")


class Edit(CamelModel):
    """Record of a single edit call"""
    id: str
    parent_generation_id: str = ""
    mask_asset_id: Optional[str] = None
    mask_reference_asset: Optional[Asset] = None
    instruction: str
    output_assets: List[Asset] = []
    timestamp: int


class BrushStroke(CamelModel):
    id: str
    points: List[float] = Field(default_factory=list, description="Flat list: x0, y0, x1, y1, ...")
    brush_size: float = 20.0


class Project(CamelModel):
    id: str
    title: str = "Untitled Project"
    generations: List[Generation] = []
    edits: List[Edit] = []
    created_at: int
    updated_at: int
