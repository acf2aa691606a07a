import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    PROJECT_NAME: str = "GS Portfolio"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./gs_portfolio.db")
    DB_ECHO: bool = _env_bool("DB_ECHO", "false")

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "gs-portfolio-backend"
    ENABLE_JWT_AUTH: bool = _env_bool("ENABLE_JWT_AUTH", "false")
    SESSION_TTL_HOURS: int = int(os.getenv("SESSION_TTL_HOURS", 24))
    SESSION_COOKIE_NAME: str = "session"
    PASSWORD_HASH_ROUNDS: int = max(100_000, int(os.getenv("PASSWORD_HASH_ROUNDS", 100_000)))

    MINIO_ENDPOINT: str = os.getenv("MINIO_ENDPOINT", "minio:9000")
    MINIO_ACCESS_KEY: str = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
    MINIO_SECRET_KEY: str = os.getenv("MINIO_SECRET_KEY", "minioadmin")
    MINIO_BUCKET: str = os.getenv("MINIO_BUCKET", "gs-portfolio")
    MINIO_SECURE: bool = _env_bool("MINIO_SECURE", "false")

    CORS_ORIGINS: list = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:5174").split(",")
        if o.strip()
    ]

    MAX_GS_FILE_SIZE: int = 100 * 1024 * 1024
    MAX_THUMBNAIL_SIZE: int = 5 * 1024 * 1024
    ALLOWED_GS_EXTENSIONS: set = {"splat", "ply"}
    ALLOWED_GS_TYPES: set = {
        "application/octet-stream",  # .splat
        "application/ply",
        "text/plain",  # ascii .ply
    }
    ALLOWED_THUMBNAIL_TYPES: set = {"image/jpeg", "image/png", "image/webp"}

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

settings = Settings()
