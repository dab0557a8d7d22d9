from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./rrchess.db"
    LICHESS_HOST: str = "https://lichess.org"
    LICHESS_TIMEOUT: float = 10.0
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
