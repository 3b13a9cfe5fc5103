"""
Password hashing
"""

from argon2 import PasswordHasher
from starlette.concurrency import run_in_threadpool

# One hasher for every insert path so all stored hashes share parameters
ph = PasswordHasher()


async def hash_password(password: str) -> str:
    """Salted argon2 hash, computed off the event loop"""
    return await run_in_threadpool(ph.hash, password)
