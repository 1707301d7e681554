import os
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

def _get_env(key: str, default: str | None = None) -> str:
    val = os.getenv(key, default)
    if val is None:
        raise RuntimeError(f"Missing required env var: {key}")
    return val

APP_ENV = _get_env("APP_ENV", "local")
LOG_LEVEL = _get_env("LOG_LEVEL", "DEBUG")
LOG_FILE = _get_env("LOG_FILE", "logs/app.log")

# hosted catalog store (Postgres)
DATABASE_URL = _get_env("DATABASE_URL")

# hosted identity provider
SUPABASE_URL = _get_env("SUPABASE_URL")
SUPABASE_ANON_KEY = _get_env("SUPABASE_ANON_KEY")

# hosted media
CLOUDINARY_CLOUD_NAME = _get_env("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = _get_env("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = _get_env("CLOUDINARY_API_SECRET")
CLOUDINARY_FOLDER = _get_env("CLOUDINARY_FOLDER", "sonie-atelier/bags")

SESSION_SECRET = _get_env("SESSION_SECRET")
SITE_URL = _get_env("SITE_URL", "http://localhost:8000").rstrip("/")

logger.debug(f"Config loaded: APP_ENV={APP_ENV}, SITE_URL={SITE_URL}, LOG_LEVEL={LOG_LEVEL}")
