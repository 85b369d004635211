from pydantic_settings import BaseSettings
from typing import List
import json


class Settings(BaseSettings):
    # Akindo upstream
    akindo_api_url: str = "https://api.akindo.io/public/wave-hacks"
    request_timeout: float = 30.0
    retry_limit: int = 3
    retry_backoff: float = 0.3  # seconds, doubled on every retry

    # Display
    display_timezone: str = "Asia/Jakarta"

    # Tool server
    server_name: str = "wave-hacks-viewer"
    server_version: str = "1.0.0"

    # App
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = '["*"]'

    @property
    def cors_origins_list(self) -> List[str]:
        return json.loads(self.cors_origins)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
