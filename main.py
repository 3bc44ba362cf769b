import logging

from onestep.goals import routes as goals_router
from onestep.progression import routes as progression_router
from onestep.execution import routes as executions_router
from onestep.system import routes as system_router
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from onestep.core.config import CORS_ORIGINS, ENABLE_DEV_ROUTES, LOG_LEVEL
from onestep.core.database import Base, engine

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="OneStep API",
    version="1.0.0",
    description="Backend for OneStep: goals, phases and one actionable step at a time.",
)

# CORS config
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(goals_router.router)
app.include_router(goals_router.phases_router)
app.include_router(goals_router.actions_router)
app.include_router(progression_router.router)
app.include_router(executions_router.router)
if ENABLE_DEV_ROUTES:
    app.include_router(system_router.router)


# DB Tables
@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)
