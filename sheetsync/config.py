import os
from pathlib import Path


class Settings:
    """Application settings with environment variable overrides."""

    APP_NAME: str = "Workbook Sync Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Paths
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    DATA_DIR: Path = Path(os.getenv("SHEETSYNC_DATA_DIR", str(BASE_DIR / "data")))
    DB_PATH: Path = DATA_DIR / "sheetsync.db"
    # Workbooks live here; requests name a file inside this directory
    EXCEL_DIR: Path = Path(os.getenv("SHEETSYNC_EXCEL_DIR", str(DATA_DIR / "excel")))
    DEFAULT_WORKBOOK: str = os.getenv("SHEETSYNC_WORKBOOK", "workbook.xlsx")

    # Copy the previous file into EXCEL_DIR/backups before each save
    BACKUP_ON_WRITE: bool = os.getenv("BACKUP_ON_WRITE", "false").lower() == "true"

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"sqlite+aiosqlite:///{DB_PATH}",
    )

    # CORS
    ALLOWED_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost").split(",")
        if o.strip()
    ]

    HISTORY_LIMIT: int = 50


settings = Settings()
