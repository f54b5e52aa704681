"""
Persistence package for the Items Service (PostgreSQL via asyncpg).
"""
