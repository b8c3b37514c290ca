"""Applied data migrations."""

from sqlalchemy import Column, DateTime, String

from ..core.database import Base
from ..utils.datetime import utcnow


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"

    version = Column(String, primary_key=True)
    applied_at = Column(DateTime, default=utcnow, nullable=False)
