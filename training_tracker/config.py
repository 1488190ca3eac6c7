import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./training.db")
    SECRET_KEY = os.getenv("SECRET_KEY", "change_this_secret_locally")
    ENV = os.getenv("ENV", "DEVELOPMENT") # DEVELOPMENT or PRODUCTION
    SESSION_COOKIE_DOMAIN = os.getenv("SESSION_COOKIE_DOMAIN") or None

    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
    API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

    TIMEZONE = os.getenv("TIMEZONE", "UTC")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Seed the default users and modules when the users table is empty
    SEED_DEFAULT_DATA = os.getenv("SEED_DEFAULT_DATA", "true").lower() in ("1", "true", "yes")

    # Local file storage
    AVATAR_DIR = os.getenv("AVATAR_DIR", "./data/avatars")
    NOTEPAD_DIR = os.getenv("NOTEPAD_DIR", "./data/notepad")
    AVATAR_MAX_BYTES = int(os.getenv("AVATAR_MAX_BYTES", "512000")) # 500 KB
