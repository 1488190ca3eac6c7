import asyncio
import sys
import os

# Add current directory to path so imports work
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from training_tracker.database import SessionLocal, init_db
from training_tracker.services.seed import seed_defaults
from training_tracker.services.storage import TrainingStorage

async def main():
    print("Initializing Database Tables...")
    await init_db()
    async with SessionLocal() as session:
        seeded = await seed_defaults(TrainingStorage(session))
    print("Tables created" + (", default users and modules seeded." if seeded else "; existing data kept."))

if __name__ == "__main__":
    asyncio.run(main())
