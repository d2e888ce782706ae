from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Host application settings
    app_name: str = "CMS Project"
    app_version: str = "1.0.0"
    host_name: str = "CMS"
    debug: bool = False
    environment: str = "development"

    # Requirement baselines applied when a plugin declares none
    default_min_python_version: str = "3.10"
    default_text_domain: str = "cms-requirements"
    locale_dir: str | None = None

    # Plugin state
    plugins_config_file: str = "data/plugins_config.json"
    multisite: bool = False
    network_active_plugins: list[str] = []
    # Dotted "module:Class" paths of plugins to load at startup
    plugins: list[str] = []

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
