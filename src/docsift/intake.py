"""
Upload validation for the calling layer.

Runs before the pipeline so that extraction only ever sees bounded input of a
supported type.
"""

from __future__ import annotations

from typing import Optional

import structlog

from .config.config import IntakeSettings
from .errors import UnsupportedMediaType, UploadTooLarge
from .extractor.models import MediaType, resolve_media_type

logger = structlog.get_logger(__name__)


class UploadValidator:
    """
    Checks an upload before extraction.

    - size against the configured ceiling (10 MiB by default)
    - declared media type (or filename) against the allow list

    The filename is only a media type hint; it is never used as a path.
    """

    def __init__(self, settings: Optional[IntakeSettings] = None) -> None:
        self.settings = settings or IntakeSettings()
        self._allowed = {resolve_media_type(name) for name in self.settings.allowed_media_types}

    def validate(self, filename: Optional[str], media_type: Optional[str], size: int) -> MediaType:
        """
        Validate an upload and return its resolved media type.

        Raises:
            UploadTooLarge: size exceeds the ceiling
            UnsupportedMediaType: type not resolvable or not allowed
        """
        if size > self.settings.max_upload_bytes:
            logger.info("Upload rejected: too large", filename=filename, size=size)
            raise UploadTooLarge(size, self.settings.max_upload_bytes)

        resolved = resolve_media_type(media_type, filename)
        if resolved not in self._allowed:
            logger.info("Upload rejected: media type not allowed", filename=filename, media_type=media_type)
            raise UnsupportedMediaType(media_type, filename)
        return resolved
