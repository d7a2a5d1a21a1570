from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CONFIG
from .routes import chat as chat_routes
from .routes import children as children_routes
from .routes import community as community_routes
from .routes import logs as log_routes
from .routes import milestones as milestone_routes
from .routes import symptoms as symptom_routes

app = FastAPI(
    title="ParentAI API",
    version="0.1.0",
    description="Child-health tracking, milestones, symptom triage and an AI parenting assistant",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONFIG.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(children_routes.router)
app.include_router(log_routes.router)
app.include_router(milestone_routes.router)
app.include_router(symptom_routes.router)
app.include_router(community_routes.router)
app.include_router(chat_routes.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "llm_configured": CONFIG.has_llm_credentials}


@app.get("/")
async def root() -> dict:
    return {"message": "ParentAI API ready"}
