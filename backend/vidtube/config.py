# vidtube/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "VidTube API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for the client application (comma separated in env)
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
        if o.strip()
    ]

    # Create tables from the models at startup (no migration tooling)
    generate_schemas: bool = _env_flag("GENERATE_SCHEMAS", "true")

    # Credentials
    access_token_secret: str = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    refresh_token_secret: str = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret")
    refresh_token_expire_days: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "10"))
    # Cookies are sent over https only when enabled
    cookie_secure: bool = _env_flag("COOKIE_SECURE", "false")

    # Pagination
    default_page_limit: int = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
    max_page_limit: int = int(os.getenv("MAX_PAGE_LIMIT", "100"))

    # Cloudinary (binary asset store)
    cloudinary_cloud_name: str | None = os.getenv("CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = os.getenv("CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = os.getenv("CLOUDINARY_API_SECRET")
    cloudinary_api_base: str = os.getenv("CLOUDINARY_API_URL", "https://api.cloudinary.com/v1_1")
    asset_store_timeout: float = float(os.getenv("ASSET_STORE_TIMEOUT", "120"))

    # Where multipart uploads are spooled before being pushed to the asset store
    upload_tmp_dir: str | None = os.getenv("UPLOAD_TMP_DIR")

settings = Settings()  # Instantiate configuration
