from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Каталог: расположение документов
    CATALOG_DATA_DIR: str = "Data"
    CATALOG_FILE: str = "Catalog.json"
    CATALOG_PATCH_FILE: str = "CatalogPatch.json"

    # Кэш и блокировки
    CATALOG_CACHE_TTL: float = Field(default=300.0, ge=0.0)
    CATALOG_LOCK_TIMEOUT: float | None = Field(default=10.0)
    CATALOG_SAVE_TIMEOUT: float = Field(default=10.0, gt=0.0)
    CATALOG_SKU_FLOOR: int = Field(default=1000, ge=0)

    # Имена прототипов
    PROTOTYPE_NAMES_FILE: str | None = None
    NAME_CACHE_TTL: int = Field(default=600, ge=1)

    # Логи
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("CATALOG_LOCK_TIMEOUT", mode="before")
    @classmethod
    def _parse_lock_timeout(cls, v):
        # пустое значение или "none" в окружении = ждать без ограничения
        if v in (None, ""):
            return None
        if isinstance(v, str) and v.strip().lower() in {"none", "off"}:
            return None
        return float(v)

    @property
    def data_dir(self) -> Path:
        return Path(self.CATALOG_DATA_DIR)

    @property
    def catalog_path(self) -> Path:
        """Return the base catalog document location."""

        return self.data_dir / self.CATALOG_FILE

    @property
    def patch_path(self) -> Path:
        return self.data_dir / self.CATALOG_PATCH_FILE


settings = Settings()
