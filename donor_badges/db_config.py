# donor_badges/db_config.py
"""Database credentials and connection string management"""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus, urlparse

from donor_badges.config import Settings

SUPPORTED_SCHEMES = ('postgresql', 'postgresql+psycopg2', 'sqlite')

@dataclass
class DatabaseCredentials:
    """Database credentials container with validation"""
    host: str
    port: int
    name: str
    user: str
    password: Optional[str] = None
    ssl_mode: str = 'prefer'

    def to_connection_string(self) -> str:
        """Generate database connection string with proper escaping"""
        auth = quote_plus(self.user)
        if self.password:
            auth += f":{quote_plus(self.password)}"
        return (
            f"postgresql://{auth}@{self.host}:{self.port}/"
            f"{self.name}?sslmode={self.ssl_mode}"
        )

    @classmethod
    def from_settings(cls, config: Settings) -> 'DatabaseCredentials':
        """Create credentials from application settings"""
        db_settings = config.database_settings
        return cls(
            host=db_settings.host,
            port=db_settings.port,
            name=db_settings.name,
            user=db_settings.user,
            password=db_settings.password,
            ssl_mode=db_settings.ssl_mode
        )

    @classmethod
    def validate_url(cls, url: str) -> bool:
        """Validate that a database URL uses a supported scheme"""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        if parsed.scheme not in SUPPORTED_SCHEMES:
            return False
        # sqlite URLs carry a path (or nothing, for in-memory) instead of a host
        if parsed.scheme == 'sqlite':
            return True
        return bool(parsed.hostname)

class DatabaseManager:
    """Resolves the database connection string from settings"""

    @staticmethod
    def get_connection_string(config: Settings) -> str:
        """
        Build the connection string for the given settings.

        Args:
            config: Application settings

        Returns:
            DATABASE_URL when set, otherwise a URL assembled from the DB_* parts

        Raises:
            ValueError: If DATABASE_URL is set but malformed
        """
        if config.DATABASE_URL:
            if not DatabaseCredentials.validate_url(config.DATABASE_URL):
                raise ValueError(f"Unsupported DATABASE_URL scheme: {urlparse(config.DATABASE_URL).scheme}")
            return config.DATABASE_URL

        return DatabaseCredentials.from_settings(config).to_connection_string()
