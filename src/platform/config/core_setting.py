from pathlib import Path
from typing import Annotated, List, Literal

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Market'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    LOG_TIMEZONE: str = 'UTC'
    LOG_DIR: str = str(_PROJECT_ROOT / 'logs')

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # CORS
    # Comma-separated in .env; NoDecode hands the raw string to the validator
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            if v.lstrip().startswith('['):
                return orjson.loads(v)
            return [i.strip() for i in v.split(',') if i.strip()]
        if isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticket_market'

    # Full URL override (tests point this at sqlite+aiosqlite)
    DATABASE_URL: str = ''

    # Engine pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_POOL_PRE_PING: bool = True
    SQLITE_BUSY_TIMEOUT_MS: int = 30000

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def IS_SQLITE(self) -> bool:
        return self.DATABASE_URL_ASYNC.startswith('sqlite')

    # Payment gateway
    PAYMENT_GATEWAY: Literal['mock', 'razorpay'] = 'mock'
    PAYMENT_CURRENCY: str = 'INR'
    RAZORPAY_BASE_URL: str = 'https://api.razorpay.com/v1'
    RAZORPAY_KEY_ID: str = ''
    RAZORPAY_KEY_SECRET: SecretStr = SecretStr('')
    # Shared secret used for HMAC-SHA256 over "order_id|payment_id"
    PAYMENT_WEBHOOK_SECRET: SecretStr = SecretStr('test_payment_webhook_secret')
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # Reservation holds
    DEFAULT_HOLD_WINDOW_MINUTES: int = 240  # 4 hours
    ENABLE_EXPIRY_REAPER: bool = True
    EXPIRY_SWEEP_INTERVAL_SECONDS: float = 30.0
    EXPIRY_SWEEP_BATCH_SIZE: int = 500

    # Gate admission window (disabled by default)
    ADMISSION_WINDOW_ENABLED: bool = False
    ADMISSION_OPENS_BEFORE_MINUTES: int = 120
    ADMISSION_CLOSES_AFTER_MINUTES: int = 0

    # Downstream "ticket activated" hook (minting / notifications)
    ACTIVATION_HOOK_URL: str = ''
    ACTIVATION_HOOK_TIMEOUT_SECONDS: float = 5.0

    # Tracing (OTLP gRPC endpoint, e.g. http://jaeger:4317; empty = spans are not exported)
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ''
    OTEL_CONSOLE_EXPORT: bool = False
    OTEL_SAMPLE_RATIO: float = 1.0


settings = Settings()  # type: ignore
