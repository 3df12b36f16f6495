from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    app_name: str = "Blackjack Rooms API"
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"
    room_code_length: int = 6
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_prefix = "BLACKJACK_"


@lru_cache()
def get_settings():
    return Settings()


def setup_logging(level: str = None) -> None:
    """
    設定 root logger（程式啟動時呼叫一次）

    參數：
        level: 日誌等級字串（DEBUG / INFO / WARNING / ERROR），
               預設讀取 Settings.log_level
    """
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug(f"Logging configured at {level}")
