"""
Configuration management for the whiskey product crawler.
Handles environment variables and application settings.
"""
import os
from typing import List
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console

    # Fetch settings (the extractor itself never touches the network)
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    ACCEPT_LANGUAGE: str = os.getenv("ACCEPT_LANGUAGE", "ko-KR,ko;q=0.8,en-US;q=0.5,en;q=0.3")

    # Comma separated list of hosts whose product pages the heuristics understand
    SUPPORTED_HOSTS: str = os.getenv("SUPPORTED_HOSTS", "dailyshot.co")

    @classmethod
    def get_supported_hosts(cls) -> List[str]:
        """Return the configured page hosts, normalized to lowercase."""
        return [
            host.strip().lower()
            for host in cls.SUPPORTED_HOSTS.split(",")
            if host.strip()
        ]


config = Config()
