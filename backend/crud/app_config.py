from typing import Optional

from sqlalchemy.orm import Session

from config import STRICT_SCHEDULE_BOUND as DEFAULT_STRICT_SCHEDULE_BOUND
from models.app_config import AppConfig, STRICT_SCHEDULE_BOUND

# Audit imports
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

TRUE_VALUES = ("1", "true", "yes", "on")


# Get config by name (or all configs)
def get_config(db: Session, tenant_id: str, name: str = None):
    if name:
        return db.query(AppConfig).filter(AppConfig.name == name, AppConfig.tenant_id == tenant_id).first()
    return db.query(AppConfig).filter(AppConfig.tenant_id == tenant_id).all()


# Create or update a config entry by name
def set_config(db: Session, name: str, value: str, tenant_id: str, user_id: str):
    db_config = get_config(db, tenant_id, name)
    if db_config:
        old_values = sqlalchemy_to_dict(db_config)
        db_config.value = str(value)
        db_config.updated_by = user_id
        action = 'UPDATE'
    else:
        db_config = AppConfig(name=name, value=str(value), tenant_id=tenant_id, created_by=user_id)
        db.add(db_config)
        old_values = {}
        action = 'CREATE'
    db.flush()

    log_entry = AuditLogCreate(
        table_name='app_config',
        record_id=db_config.id,
        changed_by=user_id,
        action=action,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_config),
        tenant_id=tenant_id,
    )
    create_audit_log(db, log_entry)
    db.commit()
    db.refresh(db_config)
    return db_config


def resolve_strict_schedule_bound(db: Session, tenant_id: str, override: Optional[bool] = None) -> bool:
    """Explicit argument, then the tenant's app_config row, then the STRICT_SCHEDULE_BOUND env default."""
    if override is not None:
        return override
    db_config = get_config(db, tenant_id, STRICT_SCHEDULE_BOUND)
    if db_config is not None:
        return db_config.value.strip().lower() in TRUE_VALUES
    return DEFAULT_STRICT_SCHEDULE_BOUND
