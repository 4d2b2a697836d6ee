import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SCHEMA_DIR: Path = Path(os.getenv("SCHEMA_DIR", str(PACKAGE_DIR / "schemas")))
    PATTERN_MESSAGES_FILE: Path = Path(
        os.getenv(
            "PATTERN_MESSAGES_FILE",
            str(PACKAGE_DIR / "schemas" / "pattern_error_messages.json"),
        )
    )


settings = Settings()
