"""Prompt templates sent to the image model alongside the inline images."""

MASK_CLAUSE = (
    "\n\nIMPORTANT: Apply changes ONLY where the mask image shows white pixels (value 255). "
    "Leave all other areas completely unchanged. Respect the mask boundaries precisely "
    "and maintain seamless blending at the edges."
)

EDIT_TEMPLATE = (
    "Edit this image according to the following instruction: {instruction}"
    "\n\nMaintain the original image's lighting, perspective, and overall composition. "
    "Make the changes look natural and seamlessly integrated."
    "{mask_clause}"
    "\n\nPreserve image quality and ensure the edit looks professional and realistic."
)

SEGMENTATION_TEMPLATE = """Analyze this image and create a segmentation mask for: {query}

Return a JSON object with this exact structure:
{{
  "masks": [
    {{
      "label": "description of the segmented object",
      "box_2d": [x, y, width, height],
      "mask": "base64-encoded binary mask image"
    }}
  ]
}}

Only segment the specific object or region requested. The mask should be a binary PNG where white pixels (255) indicate the selected region and black pixels (0) indicate the background."""


def build_edit_prompt(instruction: str, has_mask: bool) -> str:
    """
    Build the instruction text for an edit request.

    Args:
        instruction: User's edit instruction, embedded verbatim
        has_mask: Whether a mask image accompanies the request

    Returns:
        Prompt text; includes the mask clause only when has_mask is true
    """
    return EDIT_TEMPLATE.format(
        instruction=instruction,
        mask_clause=MASK_CLAUSE if has_mask else ""
    )


def build_segmentation_prompt(query: str) -> str:
    """Build the instruction text asking the model for masks matching `query`."""
    return SEGMENTATION_TEMPLATE.format(query=query)
