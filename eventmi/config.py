from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Store (the events table the verifier inspects)
    database_url: str = "sqlite:///./eventmi.db"

    # Endpoint surface under verification
    base_url: str = "https://localhost:7236"
    request_timeout: float = 30.0  # seconds, per round trip
    verify_tls: bool = True  # set false for dev certificates

    # Timezone the MM/dd/yyyy hh:mm tt wire timestamps are interpreted in
    wire_timezone: str = "UTC"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
