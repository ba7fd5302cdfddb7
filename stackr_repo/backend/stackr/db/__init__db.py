import logging

from .base import Base
from .models import storage  # noqa: F401  registers tables on Base.metadata
from .session import engine

logger = logging.getLogger(__name__)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")
