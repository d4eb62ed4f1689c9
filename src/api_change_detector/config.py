"""Settings for group discovery and service-level analysis."""

import os

from pydantic import BaseModel, Field

FILE_PREFIX = "apiDocs-"
MAIN_GROUP = "all"
SERVICES_ROOT_ENV = "API_DIFF_SERVICES_ROOT"

DISPLAY_NAMES = {
    "all": "Complete API",
    "api": "Public API",
    "internal": "Internal API",
    "admin": "Admin API",
    "mobile": "Mobile API",
    "partner": "Partner API",
    "webhook": "Webhook API",
}


class DetectorSettings(BaseModel):
    """Where API documents live and how they are named."""

    file_prefix: str = FILE_PREFIX
    # Order matters: earlier extensions win when a group exists in several formats.
    extensions: list[str] = Field(default_factory=lambda: ["yaml", "yml", "json"])
    display_names: dict[str, str] = Field(default_factory=lambda: dict(DISPLAY_NAMES))
    main_group: str = MAIN_GROUP
    services_root: str = "services"

    def main_spec_names(self) -> list[str]:
        """File names of the main group document, in lookup order."""
        return [f"{self.file_prefix}{self.main_group}.{ext}" for ext in ("yaml", "json")]


def get_settings() -> DetectorSettings:
    """Build settings from defaults plus environment overrides."""
    services_root = os.getenv(SERVICES_ROOT_ENV)
    if services_root:
        return DetectorSettings(services_root=services_root)
    return DetectorSettings()
