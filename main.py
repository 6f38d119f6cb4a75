# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecg_engine.api import app as engine_app
from ecg_engine.constants import CORS_ORIGINS, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="ECG Rhythm Engine API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

@app.get("/")
def read_root():
    return {"message": "ECG Rhythm Engine API is running", "status": "ok"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}

app.mount("/api", engine_app)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
