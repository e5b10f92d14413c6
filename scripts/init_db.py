"""
Database initialization script

Run once to create the users indexes and print collection stats:
    python scripts/init_db.py
"""

import asyncio
import logging

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from placement_api.core.config import settings  # noqa: E402
from placement_api.db.indexes import create_indexes  # noqa: E402
from placement_api.db.mongo import MongoStore  # noqa: E402
from placement_api.models.user import Role  # noqa: E402

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def main():
    """Main initialization"""
    logger.info("=" * 60)
    logger.info("  Placement Portal Database Setup")
    logger.info("=" * 60 + "\n")

    store = MongoStore(settings)
    await store.connect()

    try:
        await create_indexes(store)

        indexes = await store.users.index_information()
        logger.info(f"\n  {settings.USERS_COLLECTION}:")
        for idx_name in indexes.keys():
            if idx_name != "_id_":
                logger.info(f"    ✅ {idx_name}")

        logger.info("\n📊 Current documents:")
        for role in Role:
            count = await store.users.count_documents({"role": role.value})
            logger.info(f"  {role.value}: {count}")

        logger.info("\n✅ Database initialization complete!")

    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
