import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from finance_api.core.config import API_NAME, CORS_ORIGINS, LOG_LEVEL
from finance_api.api.routes import router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=API_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.get("/")
def root():
    return {"message": "Finance Forecasting API running"}
