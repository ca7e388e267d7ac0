from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scout.config import AppConfig, Settings, get_config, get_settings
from scout.core.database import get_db
from scout.worker.factory import Services, get_services

# Type aliases for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Config = Annotated[AppConfig, Depends(get_config)]
ServicesDep = Annotated[Services, Depends(get_services)]
