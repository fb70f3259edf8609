"""
Configuration Management for Ledger

pydantic-settings models loaded from environment variables and a .env file.

DESIGN DECISION: Settings are read once, at wiring time (see
ledger.orchestrator). Tag bounds and the storage backend reach the
filtering engine through constructors, never through a global lookup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Where the Google Sheets backend keeps records, vocabularies and audit rows."""
    
    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )
    
    credentials_path: str = Field(
        ...,
        description="Service account key file used to authorize gspread"
    )
    spreadsheet_id: str = Field(
        ...,
        description="Key of the spreadsheet holding all worksheets"
    )
    
    records_sheet_name: str = Field(
        default="Records",
        description="Worksheet with one row per record"
    )
    tags_sheet_name: str = Field(
        default="Tags",
        description="Worksheet with one vocabulary row per user"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Append-only worksheet of audit events"
    )
    
    @field_validator('credentials_path')
    @classmethod
    def check_credentials_file(cls, v: str) -> str:
        """The key file may be mounted after start-up, so a missing one only warns."""
        if not Path(v).is_file():
            import warnings
            warnings.warn(f"Service account key file {v} does not exist yet.")
        return v


class AppSettings(BaseSettings):
    """
    Engine and service settings.
    
    Read from plain (unprefixed) environment variables or .env.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    app_environment: str = Field(
        default="development",
        description="Deployment name, reported in logs"
    )
    debug_mode: bool = Field(
        default=False,
        description="Expose internal error messages in 500 responses"
    )
    
    # Tag rules
    tag_min_length: int = Field(
        default=3,
        ge=1,
        description="Shortest accepted tag after trimming"
    )
    tag_max_length: int = Field(
        default=20,
        ge=1,
        description="Longest accepted tag after trimming"
    )
    
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Which record storage adapter to use"
    )
    
    @model_validator(mode='after')
    def validate_tag_bounds(self) -> 'AppSettings':
        if self.tag_max_length < self.tag_min_length:
            raise ValueError("tag_max_length cannot be smaller than tag_min_length")
        return self


class Settings(BaseSettings):
    """
    Entry point to every settings group.
    
    Groups are built on access, so a deployment using the in-memory
    backend never needs Google Sheets variables.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Cached Settings; get_settings.cache_clear() forces a reload."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try to load every settings group.
    
    Maps each group name to whether it loaded; a failed group also gets a
    "<name>_error" entry with the reason. Meant for start-up checks.
    """
    settings = get_settings()
    results = {}
    
    for name in ("google_sheets", "app"):
        try:
            getattr(settings, name)
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
        else:
            results[name] = True
    
    return results
