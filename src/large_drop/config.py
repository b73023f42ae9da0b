"""
Service Configuration

Settings are read from the environment, with a .env file in the working
directory loaded first when present.

Environment variables:
    LARGE_DROP_API_HOST: Bind address for the REST API (default 127.0.0.1)
    LARGE_DROP_API_PORT: Bind port for the REST API (default 8000)
    LARGE_DROP_LOG_LEVEL: Root logging level (default INFO)
    LARGE_DROP_CORS_ORIGINS: Comma separated allowed origins (default *)
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class Settings:
    """Runtime settings for the campaign service."""
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


def get_settings() -> Settings:
    """
    Build settings from the current environment.
    
    Raises:
        ValueError: If LARGE_DROP_API_PORT is not a valid port number
    """
    port_text = os.getenv('LARGE_DROP_API_PORT', '8000')
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"LARGE_DROP_API_PORT must be an integer, got {port_text!r}")
    if not 0 < port < 65536:
        raise ValueError(f"LARGE_DROP_API_PORT out of range: {port}")

    origins = os.getenv('LARGE_DROP_CORS_ORIGINS', '*')

    return Settings(
        api_host=os.getenv('LARGE_DROP_API_HOST', '127.0.0.1'),
        api_port=port,
        log_level=os.getenv('LARGE_DROP_LOG_LEVEL', 'INFO').upper(),
        cors_origins=[origin.strip() for origin in origins.split(',') if origin.strip()],
    )
