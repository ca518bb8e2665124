"""Repository for admin-editable platform settings."""

from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from ..models.platform_setting import PlatformSetting
from .base_repository import BaseRepository


class PlatformSettingRepository(BaseRepository[PlatformSetting]):
    def __init__(self, db: Session):
        super().__init__(db, PlatformSetting)

    def get_values(self, keys: Iterable[str]) -> Dict[str, str]:
        rows = self._execute_query(self._build_query().filter(PlatformSetting.key.in_(list(keys))))
        return {row.key: row.value for row in rows}

    def upsert(
        self, key: str, value: str, *, description: Optional[str] = None, updated_by: Optional[str] = None
    ) -> PlatformSetting:
        setting = self.find_one_by(key=key)
        if setting is None:
            return self.create(key=key, value=value, description=description, updated_by=updated_by)
        setting.value = value
        setting.updated_by = updated_by
        if description is not None:
            setting.description = description
        self.db.flush()
        return setting
