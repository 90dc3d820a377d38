from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"

    app_version: str = "1.0.0"
    log_level: str = "INFO"
    sql_echo: bool = False

    # Сколько версий хранить на один документ
    version_retention_limit: int = 100
    # Повторы транзакции при гонке за номер версии
    version_write_retries: int = 3

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
