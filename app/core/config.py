from pydantic import model_validator
from pydantic_settings import BaseSettings

INSECURE_SECRETS = (
    "your_secret_key_here",
    "changeme",
    "secret",
)

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./badminton.db"
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ENVIRONMENT: str = "development" # "development", "test" or "production"
    LOG_LEVEL: str = "INFO"
    MAX_TEAM_MEMBERS: int = 10

    class Config:
        env_file = ".env"

    @model_validator(mode="after")
    def secret_key_is_safe_for_production(self):
        if self.ENVIRONMENT == "production":
            lowered = self.SECRET_KEY.lower()
            if len(self.SECRET_KEY) < 32 or any(value in lowered for value in INSECURE_SECRETS):
                raise ValueError("SECRET_KEY is insecure for production")
        return self

settings = Settings()
