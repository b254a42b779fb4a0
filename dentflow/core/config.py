# dentflow/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "DentFlow API"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    JWT_SECRET: str = Field(...)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "dentflow"
    DB_PASSWORD: str = ""
    DB_NAME: str = "dentflow"
    # full SQLAlchemy URL; wins over DB_* when set (sqlite+aiosqlite in tests)
    DATABASE_URL: str | None = None

    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    MAX_UPLOAD_MB: int = 2
    MEDIA_FOLDER_PATIENT_PHOTOS: str = "dentflow/patients"

    CLINIC_TIMEZONE: str = "Asia/Kolkata"
    MAX_APPOINTMENTS_PER_DAY: int = 15

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)


settings = Settings()  # type: ignore[call-arg]
