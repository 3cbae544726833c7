import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.routers import auth, draft_ws, drafts

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Pick & Ban Draft",
    description="Two-player pick & ban drafts with realtime updates",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Draft-Error"],
)

app.include_router(auth.router)
app.include_router(drafts.router)
app.include_router(draft_ws.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
