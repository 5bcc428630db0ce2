from fastapi import FastAPI

from app.api.endpoints import auth as auth_endpoints
from app.api.endpoints import users as user_endpoints
from app.api.endpoints import teams as team_endpoints
from app.api.endpoints import players as player_endpoints
from app.api.endpoints import venues as venue_endpoints
from app.api.endpoints import matches as match_endpoints
from app.api.endpoints import stats as stats_endpoints
from app.core.logging_config import setup_logging
# Importing the models package registers them and creates the tables
import app.models

setup_logging()

app = FastAPI(title="Badminton Team Scheduler API")

# Include routers
app.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
app.include_router(user_endpoints.router, prefix="/users", tags=["Users"])
app.include_router(team_endpoints.router, prefix="/teams", tags=["Teams"])
app.include_router(player_endpoints.router, prefix="/players", tags=["Players"])
app.include_router(venue_endpoints.router, prefix="/venues", tags=["Venues"])
app.include_router(match_endpoints.router, prefix="/matches", tags=["Matches"])
app.include_router(stats_endpoints.router, prefix="/stats", tags=["Statistics"])


@app.get("/")
async def root():
    return {"message": "Badminton Team Scheduler API"}
