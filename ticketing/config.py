from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "TK_", "env_file": ".env", "env_file_encoding": "utf-8"}

    jwt_secret: str = Field(min_length=32)
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=1440, gt=0)
    qr_secret_key: str = Field(min_length=32)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    db_path: str = Field(default="ticketing.db")
    cors_origins: str = Field(default="http://localhost:3000")

    # Check-in opens this many hours before start and closes this many after end
    checkin_window_hours: int = Field(default=2, ge=0)

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
