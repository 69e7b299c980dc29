"""
Settings loaded from the environment (and a local .env file)
"""
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_decimal(name: str, default: str) -> Decimal:
    value = os.getenv(name, default)
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, str(default))
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the engine and the CLI tools"""
    db_host: str = 'localhost'
    db_port: int = 5432
    db_name: str = 'txn_db'
    db_user: str = 'txn_user'
    db_password: str = 'txn_password_local_dev'
    base_currency: str = 'GHS'
    budget_warning_threshold: Decimal = Decimal('0.80')
    review_threshold: float = 0.70
    ledger_record_rejected: bool = True
    screen_promotions: bool = False
    batch_size: int = 10
    batch_pause_seconds: float = 0.1

    @classmethod
    def from_env(cls, base_currency: Optional[str] = None) -> 'Settings':
        """
        Build settings from environment variables

        Args:
            base_currency: Overrides BASE_CURRENCY when given

        Returns:
            Settings instance
        """
        warning = _env_decimal('BUDGET_WARNING_THRESHOLD', '0.80')
        if not Decimal('0') < warning <= Decimal('1'):
            raise ConfigurationError(
                f"BUDGET_WARNING_THRESHOLD must be in (0, 1], got {warning}")

        batch_size = _env_int('BATCH_SIZE', 10)
        if batch_size < 1:
            raise ConfigurationError(f"BATCH_SIZE must be positive, got {batch_size}")

        return cls(
            db_host=os.getenv('DB_HOST', 'localhost'),
            db_port=_env_int('DB_PORT', 5432),
            db_name=os.getenv('DB_NAME', 'txn_db'),
            db_user=os.getenv('DB_USER', 'txn_user'),
            db_password=os.getenv('DB_PASSWORD', 'txn_password_local_dev'),
            base_currency=(base_currency or os.getenv('BASE_CURRENCY', 'GHS')).upper(),
            budget_warning_threshold=warning,
            review_threshold=float(_env_decimal('REVIEW_THRESHOLD', '0.70')),
            ledger_record_rejected=_env_bool('LEDGER_RECORD_REJECTED', True),
            screen_promotions=_env_bool('SCREEN_PROMOTIONS', False),
            batch_size=batch_size,
            batch_pause_seconds=float(_env_decimal('BATCH_PAUSE_SECONDS', '0.1')),
        )
