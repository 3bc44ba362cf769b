import os
from dotenv import load_dotenv

load_dotenv()  # Load from .env file

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./onestep.db")

# Token & Auth
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Day boundaries for the execution ledger
TIMEZONE = os.getenv("TIMEZONE", "UTC")

# Reject a second completion on the same calendar day
ONE_ACTION_PER_DAY = os.getenv("ONE_ACTION_PER_DAY", "false").lower() in ("1", "true", "yes")

# Debug listings and token minting under /system
ENABLE_DEV_ROUTES = os.getenv("ENABLE_DEV_ROUTES", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
