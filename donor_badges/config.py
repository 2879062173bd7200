"""Application configuration and environment settings"""
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class DatabaseSettings(BaseModel):
    """Database connection parameters"""
    host: str = Field(..., description="Database host")
    port: int = Field(..., description="Database port")
    name: str = Field(..., description="Database name")
    user: str = Field(..., description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    ssl_mode: str = Field("require", description="libpq sslmode")

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Full SQLAlchemy URL, takes precedence over the DB_* parts below
    DATABASE_URL: Optional[str] = Field(None, description="SQLAlchemy database URL")

    DB_HOST: str = Field("localhost", description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field("donations", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password")
    DB_SSL_MODE: str = Field("prefer", description="libpq sslmode")

    # Evaluation context
    DONOR_ID: Optional[str] = Field(None, description="Donor to evaluate when none is given on the command line")
    OUTPUT_DIR: str = Field("/output", description="Directory for output files")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")

    @property
    def database_settings(self) -> DatabaseSettings:
        """Get database connection parameters as a separate model"""
        return DatabaseSettings(
            host=self.DB_HOST,
            port=self.DB_PORT,
            name=self.DB_NAME,
            user=self.DB_USER,
            password=self.DB_PASSWORD,
            ssl_mode=self.DB_SSL_MODE
        )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

settings = Settings()
