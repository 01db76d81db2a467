import logging
import os

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

load_dotenv()

import game_data
from game_ws import router as game_router

STATIC_DIR = os.getenv("STATIC_DIR", "webapp")

app = FastAPI()


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game_router)


@app.get("/api/state")
def get_state():
    # то же, что получает каждый зритель по WS
    return game_data.manager.session.public_state()


# Клиент (index.html и т.п.) — только если каталог есть
if os.path.isdir(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="webapp")

if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    port = int(os.getenv("PORT", 8000))
    uvicorn.run("server:app", host=os.getenv("HOST", "0.0.0.0"), port=port)
