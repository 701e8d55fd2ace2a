import logging
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv(override=False)

logger = logging.getLogger(__name__)

DEFAULT_ENCODE_KEY = "your-secret-key"


class Settings(BaseSettings):
    PROJECT_NAME: str = "TipJar"
    # Application settings
    PORT: int = 5000
    HOST: str = "127.0.0.1"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"
    DOC_PASSWORD: str | None = None

    # SSL settings
    SSL_KEY: str | None = None
    SSL_CERT: str | None = None

    # SQLAlchemy database URL
    DATABASE_URL: str = "sqlite:///./tipjar.db"

    # Login configuration
    ENCODE_KEY: str = DEFAULT_ENCODE_KEY
    ENCODE_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 7 * 24 * 3600  # 7 days
    NONCE_EXPIRY_SECONDS: int = 300  # 5 minutes
    NONCE_SWEEP_INTERVAL_SECONDS: int = 300

    # Redis settings
    REDIS_HOST: str | None = None
    REDIS_PORT: int | None = 6379
    REDIS_MAX_CONNECTIONS: int | None = 10
    REDIS_SSL: bool | None = False
    # Memory cache settings
    MEMORY_CACHE_MAX_SIZE: int = 256 * 1024 * 1024  # 256MB in bytes
    REDIS_RECHECK_INTERVAL: int = 30 * 60  # 30 minutes in seconds

    # Blockchain settings
    RPC_URL: str | None = None
    CHAIN_ID: int = 11155111  # sepolia
    TIPJAR_FACTORY_ADDRESS: str | None = None
    BLOCKCHAIN_TIMEOUT_SECONDS: float = 10

    # Upload settings
    MAX_FILE_SIZE: int = 50 * 1024 * 1024  # 50MB
    MAX_THUMBNAIL_SIZE: int = 10 * 1024 * 1024  # 10MB
    UPLOAD_DIR: str = "uploads"

    # CORS, comma separated
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Debug settings
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def warn_insecure_defaults(self) -> None:
        if self.ENCODE_KEY == DEFAULT_ENCODE_KEY:
            logger.warning("Using default ENCODE_KEY. Set ENCODE_KEY in production!")
        if not self.TIPJAR_FACTORY_ADDRESS:
            logger.warning("TIPJAR_FACTORY_ADDRESS not set. Blockchain features will not work.")


# Instantiate the settings
settings = Settings()
