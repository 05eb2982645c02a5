import os
from typing import List, Optional, Tuple


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(
            f"Missing required environment variable '{name}'. "
            "Set it in the environment or the service .env file."
        )
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable '{name}' must be an integer, got {raw!r}")


# PUBLIC_INTERFACE
def jwt_secret() -> str:
    """Signing secret for access tokens. Required; there is no default."""
    return _required_env("JWT_SECRET")


# PUBLIC_INTERFACE
def jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


# PUBLIC_INTERFACE
def jwt_expires_minutes() -> int:
    return _int_env("JWT_EXPIRES_MINUTES", 10080)  # default: 7 days


# PUBLIC_INTERFACE
def sqlite_path() -> Optional[str]:
    """Path of the SQLite database, or None when PostgreSQL should be used."""
    return os.getenv("SQLITE_PATH") or None


# PUBLIC_INTERFACE
def postgres_dsn() -> str:
    """
    Build DSN from the standardized database env vars.

    Uses:
      - POSTGRES_URL (optional full DSN; if provided, it wins)
      - POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB, POSTGRES_PORT
      - POSTGRES_HOST (optional, defaults to localhost)
    """
    url = os.getenv("POSTGRES_URL")
    if url:
        return url

    user = _required_env("POSTGRES_USER")
    password = _required_env("POSTGRES_PASSWORD")
    db = _required_env("POSTGRES_DB")
    port = _required_env("POSTGRES_PORT")
    host = os.getenv("POSTGRES_HOST", "localhost")
    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


# PUBLIC_INTERFACE
def pool_bounds() -> Tuple[int, int]:
    """(minconn, maxconn) for the PostgreSQL connection pool."""
    return _int_env("DB_POOL_MIN", 1), _int_env("DB_POOL_MAX", 10)


# PUBLIC_INTERFACE
def server_host() -> str:
    return os.getenv("HOST", "0.0.0.0")


# PUBLIC_INTERFACE
def server_port() -> int:
    return _int_env("PORT", 3001)


# PUBLIC_INTERFACE
def cors_allow_origins() -> List[str]:
    """Allowed CORS origins from CORS_ALLOW_ORIGINS (comma separated), default all."""
    env_val = os.getenv("CORS_ALLOW_ORIGINS")
    if env_val:
        origins = [o.strip() for o in env_val.split(",") if o.strip()]
        if origins:
            return origins
    return ["*"]


# PUBLIC_INTERFACE
def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


# PUBLIC_INTERFACE
def log_json() -> bool:
    return os.getenv("LOG_JSON", "").strip().lower() in ("1", "true", "yes", "on")
