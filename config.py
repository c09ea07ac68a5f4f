import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_key: str = os.getenv("API_KEY", "super-secret-key")

    # Database settings
    database_file: str = os.getenv("BOOKSTORE_DB_FILE", "bookstore.db")

    # Addressing
    content_authority: str = os.getenv("BOOKSTORE_AUTHORITY", "com.example.bookstore")

    # Display
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "€")

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Bookstore Inventory")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()
