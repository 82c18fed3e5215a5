"""
Runtime settings for the Chavi backend.

Values come from environment variables; a `.env` file in the working
directory is loaded first so local development does not need exported vars.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(',') if o.strip()] or ['*']


@dataclass
class Settings:
    # Use DATABASE_URL env var. Default to sqlite file in repo root for dev.
    database_url: str = field(default_factory=lambda: os.getenv('DATABASE_URL', 'sqlite:///./chavi.db'))
    razorpay_key_id: Optional[str] = field(default_factory=lambda: os.getenv('RAZORPAY_KEY_ID'))
    razorpay_key_secret: Optional[str] = field(default_factory=lambda: os.getenv('RAZORPAY_KEY_SECRET'))
    razorpay_base_url: str = field(default_factory=lambda: os.getenv('RAZORPAY_BASE_URL', 'https://api.razorpay.com/v1'))
    gateway_timeout: float = field(default_factory=lambda: float(os.getenv('GATEWAY_TIMEOUT', '10')))
    currency: str = field(default_factory=lambda: os.getenv('PAYMENT_CURRENCY', 'INR'))
    admin_api_key: Optional[str] = field(default_factory=lambda: os.getenv('ADMIN_API_KEY'))
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv('CORS_ORIGINS', '*')))
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', 'INFO'))
    host: str = field(default_factory=lambda: os.getenv('HOST', '0.0.0.0'))
    port: int = field(default_factory=lambda: int(os.getenv('PORT', '3000')))


def configure_logging(level: str = 'INFO') -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    # basicConfig is a no-op once the root logger has handlers (uvicorn, pytest)
    logging.getLogger('chavi').setLevel(lvl)
