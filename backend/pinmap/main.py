from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pinmap.routes.map import router as map_router
from pinmap.routes.pins import router as pins_router
from pinmap.observability import setup_logging
from pinmap.runtime import get_session
import os

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    session = get_session()
    # The app is up and serving: safe to read persisted pins and build the map
    session.guard.open()
    try:
        yield
    finally:
        session.dispose()


app = FastAPI(title="Pinmap API", lifespan=lifespan)

allow_origins = os.getenv("API_CORS_ALLOW_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(map_router)
app.include_router(pins_router)

@app.get("/health")
def health():
    return {"status": "ok"}
