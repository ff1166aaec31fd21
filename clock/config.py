import os
from typing import List

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")


def parse_vibration_pattern(raw: str) -> List[int]:
    """Parse a comma separated list of milliseconds, e.g. "200,100,200" """
    pattern = [int(part) for part in raw.split(",") if part.strip()]

    if any(step < 0 for step in pattern):
        raise ValueError(f"Vibration pattern must not contain negative values: {raw}")

    return pattern


# Persistence (unset keeps the active timer in memory only)
TIMER_STORE_PATH = os.getenv("TIMER_STORE_PATH")

# Tick loop period in seconds
TIMER_TICK_INTERVAL = float(os.getenv("TIMER_TICK_INTERVAL", "1.0"))

# Device feedback on expiry
TIMER_VIBRATION_PATTERN = parse_vibration_pattern(
    os.getenv("TIMER_VIBRATION_PATTERN", "200,200,200,200,200")
)
EXPO_PUSH_TOKEN = os.getenv("EXPO_PUSH_TOKEN")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
