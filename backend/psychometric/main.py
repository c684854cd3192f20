import logging

from fastapi import FastAPI
from dotenv import load_dotenv

from psychometric.config import log_level
from psychometric.db import init_db
from psychometric.api.sessions import router as sessions_router

load_dotenv()
logging.basicConfig(
    level=log_level(),
    format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
)
for noisy_logger in ("httpx", "openai"):
    logging.getLogger(noisy_logger).setLevel(logging.WARNING)

init_db()

app = FastAPI(title="Psychometric Assessment API")


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(sessions_router)
