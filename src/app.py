"""
Users & Addresses API server
Core functionality: user CRUD, per-user addresses, atomic user+addresses creation
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS
from database.connection import init_database, close_database
from api.routes import health, users, addresses
from middleware.request_logger import RequestLoggingMiddleware
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the connection pool for the lifetime of the app"""
    app.state.db_pool = await init_database()
    yield
    await close_database(app.state.db_pool)
    app.state.db_pool = None


# FastAPI app initialization
app = FastAPI(
    title="Users & Addresses API",
    description="CRUD API for users and their addresses",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Added last so it wraps everything and sees the final status code
app.add_middleware(RequestLoggingMiddleware)

setup_error_handling(app)

# Include API routes; fixed /users/... paths live in the users router ahead of /users/{user_id}
app.include_router(health.router, tags=["Health"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(addresses.router, prefix="/users", tags=["Addresses"])
