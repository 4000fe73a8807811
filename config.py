"""
Environment-driven settings for the catalog API.
Values are read once from the process environment (and a local .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ----- MongoDB -----
DATABASE_URL: str = os.getenv("DATABASE_URL", "")
DATABASE_NAME: str = os.getenv("DATABASE_NAME", "")

# ----- Server -----
PORT: int = int(os.getenv("PORT", "8000"))

_raw_origins = os.getenv("CORS_ORIGINS", "*")
CORS_ORIGINS: list[str] = [o.strip() for o in _raw_origins.split(",") if o.strip()] or ["*"]

# ----- Admin session -----
ADMIN_SESSION_COOKIE: str = os.getenv("ADMIN_SESSION_COOKIE", "adminSession")
ADMIN_SESSION_VALUE: str = os.getenv("ADMIN_SESSION_VALUE", "true")

# ----- Logging -----
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
