"""Application configuration."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    """Application configuration loaded from environment variables."""
    
    # Table defaults
    default_small_blind: int = int(os.getenv("DEFAULT_SMALL_BLIND", "5"))
    default_table_size: int = int(os.getenv("DEFAULT_TABLE_SIZE", "8"))
    max_table_size: int = int(os.getenv("MAX_TABLE_SIZE", "10"))
    
    # Hand launch
    min_players: int = int(os.getenv("MIN_PLAYERS", "2"))
    
    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


config = Config()
