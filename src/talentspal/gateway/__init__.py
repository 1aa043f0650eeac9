from __future__ import annotations

from .app import create_app
from .uploads import validate_image_upload

__all__ = ["create_app", "validate_image_upload"]
