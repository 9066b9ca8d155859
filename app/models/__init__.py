from app.models.base import Base
from app.models.token import Token
from app.models.snapshot import DailySnapshot
from app.models.system_config import SystemConfig

__all__ = [
    "Base",
    "Token",
    "DailySnapshot",
    "SystemConfig",
]
