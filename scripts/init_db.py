#!/usr/bin/env python3
"""
Initialize database with all tables
"""
import asyncio

from standup_assistant.database import engine, init_models
from standup_assistant.models.base import Base


async def init_database():
    """Create all tables"""
    print("🗄️  Initializing database...")
    await init_models(engine)
    print(f"Created tables: {', '.join([t.name for t in Base.metadata.sorted_tables])}")
    print("✅ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
