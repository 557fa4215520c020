import asyncio
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import db, test_connection
from routers import all_routers
from triggers import watch_user_role_changes
from utils.errors import NotAuthenticatedError

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ROLE_SYNC_ENABLED = os.getenv("ROLE_SYNC_ENABLED", "true").lower() in ("1", "true", "yes")
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

app = FastAPI(
    title="Budget API",
    description="Shared budget tracking: transactions, categories, shopping lists and users",
    version="1.0.0"
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include all routers
for router in all_routers:
    app.include_router(router)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.on_event("startup")
async def startup_db_client():
    await test_connection()
    if ROLE_SYNC_ENABLED:
        app.state.role_sync_task = asyncio.create_task(watch_user_role_changes(db))


@app.on_event("shutdown")
async def shutdown_role_sync():
    task = getattr(app.state, "role_sync_task", None)
    if task is not None:
        task.cancel()


@app.get("/")
async def root():
    return {"message": "Budget API is running. Visit /docs for API documentation."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
