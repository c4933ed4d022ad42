#config/settings

import os
from dotenv import load_dotenv

# Carrega as variáveis do arquivo .env
load_dotenv()

# JWT
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "3"))


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./babycare.db")

# Media/Photos, Media/Videos, Media/Thumbnails
MEDIA_ROOT = os.getenv("MEDIA_ROOT", "./Media")

# Cloud analysis
ANALYSIS_API_URL = os.getenv("ANALYSIS_API_URL", "https://api.deepseek.com/v1/analyze")
ANALYSIS_API_KEYS = [
    key.strip()
    for key in os.getenv("ANALYSIS_API_KEYS", "sk-demo-key").split(",")
    if key.strip()
]
ANALYSIS_HOURLY_LIMIT = int(os.getenv("ANALYSIS_HOURLY_LIMIT", "10"))
ANALYSIS_DAILY_LIMIT = int(os.getenv("ANALYSIS_DAILY_LIMIT", "30"))

SOCIAL_SIMULATED_DELAY = float(os.getenv("SOCIAL_SIMULATED_DELAY", "1.0"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")
