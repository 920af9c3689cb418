"""
Runtime configuration read from the environment (and an optional .env file).
"""
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./pizza.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

# Plain integer page size for order history
ORDER_PAGE_SIZE = int(os.getenv("ORDER_PAGE_SIZE", "10"))

# Default deadline (seconds) for order creation requests; 0 disables it
DB_TIMEOUT_SECONDS = float(os.getenv("DB_TIMEOUT_SECONDS", "0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
