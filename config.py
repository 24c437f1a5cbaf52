import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Discord Bot Configuration
TOKEN = os.getenv('DISCORD_TOKEN')

# Storage
DATABASE_PATH = os.getenv('DATABASE_PATH', 'database/database.db')

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE', 'discord.log')

# Looting
NO_ENCOUNTER_CHANCE = int(os.getenv('NO_ENCOUNTER_CHANCE', '20'))
BLOOD_MOON_ACTIVE = _as_bool(os.getenv('BLOOD_MOON_ACTIVE', 'false'))
