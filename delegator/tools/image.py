"""
Image route: text-to-image or image edit through a Pollinations-style URL endpoint.

The generated URL is itself the renderable artifact. The endpoint renders on
first request, so the URL is verified with a HEAD request before it is returned.
Non-success responses raise ImageGenerationError and are not retried here.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Optional
from urllib.parse import quote, urlencode

import requests

from delegator.errors import ImageGenerationError
from delegator.types import ImageReference

logger = logging.getLogger(__name__)

IMAGE_BASE_URL = os.getenv("IMAGE_BASE_URL", "https://image.pollinations.ai/prompt")
TEXT_TO_IMAGE_MODEL = "flux"
EDIT_MODEL = "kontext"


class ImageTool:
    """Builds and verifies image generation URLs."""

    def __init__(
        self,
        base_url: str = IMAGE_BASE_URL,
        size: int = 1024,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.size = size
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_url(self, prompt: str, model: str, source_image_url: Optional[str] = None) -> str:
        params = {
            "model": model,
            "width": str(self.size),
            "height": str(self.size),
            "nologo": "true",
            "seed": str(random.randint(0, 999_999)),
        }
        if source_image_url:
            params["image"] = source_image_url
        return f"{self.base_url}/{quote(prompt, safe='')}?{urlencode(params)}"

    def generate(self, prompt: str, source_image_url: Optional[str] = None) -> ImageReference:
        model = EDIT_MODEL if source_image_url else TEXT_TO_IMAGE_MODEL
        url = self.build_url(prompt, model, source_image_url)
        logger.info("Requesting image (model=%s)", model)
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise ImageGenerationError(f"Image request failed: {e}") from e
        if not response.ok:
            raise ImageGenerationError(
                f"Image endpoint returned {response.status_code}: {response.reason}"
            )
        return ImageReference(url=url, prompt=prompt, model=model)
