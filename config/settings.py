"""Configuration management module"""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

SCHEMAS_DIR = Path(__file__).parent / "schemas"


class ArchitectSettings(BaseSettings):
    """Architect settings, read from ARCHITECT_* environment variables and .env"""

    model_config = SettingsConfigDict(
        env_prefix="ARCHITECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Workspace ====================
    workspace_file: str = "workspace.yaml"

    # ==================== Schema documents ====================
    targets_schema_path: str = str(SCHEMAS_DIR / "targets-schema.json")
    builders_schema_path: str = str(SCHEMAS_DIR / "builders-schema.json")

    # ==================== Builder resolution ====================
    package_manifest_name: str = "package.json"  # Manifest carrying the "builders" pointer
    package_modules_dir: str = "node_modules"  # Searched in every ancestor of the workspace root
    default_export_name: str = "default"  # Used when the implementation path has no '#Export'

    # ==================== Caching ====================
    single_flight: bool = True  # Share concurrent cold-path resolutions of one key

    # ==================== Logging ====================
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
    log_rotation: str = "1 day"
    log_retention: str = "7 days"


# Global settings instance
settings = ArchitectSettings()
