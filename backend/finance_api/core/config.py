import os
from dotenv import load_dotenv

load_dotenv()

API_NAME = os.getenv("API_NAME", "Finance Forecasting API")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("API_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Trained sequence-model weights, one .pt file per artifact key
MODEL_DIR = os.getenv(
    "FORECAST_MODEL_DIR",
    os.path.join(os.path.dirname(__file__), "..", "..", "forecasting", "saved_models"),
)

# Optional {"transactions": [...], "goals": [...]} document to serve from memory
DATA_PATH = os.getenv("FORECAST_DATA_PATH")

# "user" keeps one model per user, "shared" one model per prediction type
ARTIFACT_SCOPE = os.getenv("ARTIFACT_SCOPE", "user").lower()
