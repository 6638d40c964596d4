"""
Configuration settings for the Stress Shield backend
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).parent

# Profiles (finances + smart goals) are written here
STORE_PATH = Path(os.getenv("STRESS_SHIELD_STORE", BASE_DIR / "stress_shield_users.json"))

LOG_LEVEL = os.getenv("STRESS_SHIELD_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("STRESS_SHIELD_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

APP_TITLE = "Stress Shield"
