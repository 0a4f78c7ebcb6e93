from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class ClientSettings(BaseSettings):
    """Settings for the Upcycle Hub API client"""
    model_config = SettingsConfigDict(
        env_prefix="UPCYCLE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    api_url: str = "http://localhost:8000"
    # Serverless deployments serve the API from a functions path instead of /api,
    # e.g. /.netlify/functions/api-direct
    functions_path: Optional[str] = None
    user_cache: str = ".upcycle_hub/user.json"
    timeout_seconds: float = 10.0
