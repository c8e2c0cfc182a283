import os

MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "pos_insights")

# In a real deployment, load from environment variables or a secrets manager
SECRET_KEY: str = os.getenv(
    "SECRET_KEY", "your-secret-key-for-jwt-!ChangeMe!"
)
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Read-only showcase deployments: every create/update/delete is rejected
DEMO_MODE: bool = os.getenv("DEMO_MODE", "False").lower() in ("true", "1", "t")

DEFAULT_ADMIN_USERNAME: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")

# Dashboard reporting
TOP_PRODUCTS_LIMIT: int = int(os.getenv("TOP_PRODUCTS_LIMIT", "5"))
REPORT_QUERY_TIMEOUT_SECONDS: float = float(os.getenv("REPORT_QUERY_TIMEOUT_SECONDS", "10"))
MIN_REPORT_YEAR: int = int(os.getenv("MIN_REPORT_YEAR", "2000"))
MAX_REPORT_YEAR: int = int(os.getenv("MAX_REPORT_YEAR", "2100"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
# Comma separated logger prefixes, e.g. "pos_insights.features.reports,pos_insights.main"
LOG_NAMESPACES: list[str] = [
    ns.strip() for ns in os.getenv("LOG_NAMESPACES", "").split(",") if ns.strip()
]
