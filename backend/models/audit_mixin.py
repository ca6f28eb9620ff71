from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz

from config import APP_TIMEZONE


def local_now() -> datetime:
    """Current time in the configured application timezone."""
    return datetime.now(pytz.timezone(APP_TIMEZONE))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Used by append-only and hard-deletable records (allocations, schedules,
    sales transactions). It does NOT include soft-delete columns.
    """
    # DateTime(timezone=True) keeps the configured timezone on the stored value.
    created_at = Column(DateTime(timezone=True), default=local_now)
    updated_at = Column(DateTime(timezone=True), onupdate=local_now)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)


class SoftDeleteMixin:
    """Mixin for soft-delete columns (deleted_at, deleted_by).

    Applied only to financial records that must survive deletion for audit
    (purchase orders, supplier payments).
    """
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)


class AuditMixin(TimestampMixin, SoftDeleteMixin):
    """Timestamps + soft-delete."""
    pass
