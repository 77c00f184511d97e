# backend/app/db/database.py
import logging

from databases import Database

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)


def build_database(cfg: Settings) -> Database:
    """Havuz sınırları ters girilmişse düzeltilir (min <= max)."""
    low, high = sorted((cfg.DB_POOL_MIN_SIZE, cfg.DB_POOL_MAX_SIZE))
    return Database(
        cfg.DATABASE_URL,
        min_size=low,
        max_size=high,
        command_timeout=cfg.DB_COMMAND_TIMEOUT,
    )


# Sipariş deposunun paylaştığı tek bağlantı havuzu
db = build_database(settings)


async def connect_all():
    if not db.is_connected:
        await db.connect()
        logger.info(f"[DB] Bağlandı: {db.url.hostname}/{db.url.database}")


async def disconnect_all():
    if db.is_connected:
        await db.disconnect()
        logger.info("[DB] Bağlantı kapatıldı")
