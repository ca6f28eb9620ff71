from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.app_config import AppConfigUpdate, AppConfigOut
from crud import app_config as crud_app_config
from utils.auth_utils import get_user_identifier, require_group
from utils.tenancy import get_tenant_id

router = APIRouter(tags=["Configuration"])
logger = logging.getLogger("app_config")


@router.get("/configurations/", response_model=List[AppConfigOut])
def get_configs(name: Optional[str] = None, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    configs = crud_app_config.get_config(db, tenant_id, name=name)
    # Always return a list, even if empty
    return [configs] if name and configs else configs or []


@router.put("/configurations/{name}/", response_model=AppConfigOut)
def set_config(
    name: str,
    config: AppConfigUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Create or replace a tenant setting, e.g. strict_schedule_bound."""
    if config.value is None:
        raise HTTPException(status_code=400, detail="value is required")
    db_config = crud_app_config.set_config(db, name, config.value, tenant_id, user_id=get_user_identifier(user))
    logger.info(f"Configuration '{name}' set to '{config.value}' for tenant {tenant_id}")
    return db_config
