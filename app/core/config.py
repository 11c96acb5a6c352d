from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pydantic import field_validator

class Settings(BaseSettings):
    # Database settings
    POSTGRES_USER: str = 'gestor_user'
    POSTGRES_PASSWORD: str = 'gestor_pass'
    POSTGRES_DB: str = 'gestor_db'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None  # Overrides the POSTGRES_* parts when set

    # Reports read their working set in a single snapshot
    REPORTS_ISOLATION_LEVEL: str = 'REPEATABLE READ'

    # JWT settings (tokens are issued elsewhere, only decoded here)
    APP_SECRET_STRING: str = 'your-super-secret-key-here-change-in-production-2024'
    ALGORITHM: str = 'HS256'

    # Pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 500

    # Permissions
    PERMISSION_ALL_CATEGORIES: str = 'outputs:view_all_categories'
    PERMISSION_CATEGORY_PREFIX: str = 'outputs:view_category:'
    PERMISSION_VIEW_EXPENSES: str = 'outputs:view'
    PERMISSION_VIEW_STATISTICS: str = 'outputs:view_statistics'
    PERMISSION_VIEW_BALANCE: str = 'balance:view'

    # Peso por unidad cuando el nombre del producto no lo indica (precio por kg del balance)
    ESTIMATED_ITEM_WEIGHT_KG: float = 8.0

    # Label for transactions without a resolvable grouping key
    UNCATEGORIZED_LABEL: str = 'Sin categoría'

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def log_level(self) -> str:
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "INFO" if self.ENVIRONMENT == "production" else "DEBUG"

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

    @field_validator("MAX_PAGE_SIZE", "DEFAULT_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v):
        if v < 1:
            raise ValueError("page sizes must be >= 1")
        return v

settings = Settings()
