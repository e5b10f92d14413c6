"""
placement_api/db/indexes.py

Purpose: Database index management

- Unique index on user email
- Indexes backing the role and counsellor-scoped listings
"""

from pymongo import ASCENDING

from placement_api.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes(store):
    """
    Creates the indexes the listing and lookup queries rely on.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = store.users

        logger.info("Creating database indexes...")

        await users.create_index(
            [("email", ASCENDING)],
            unique=True,
            sparse=True,
            name="email_unique"
        )
        logger.debug("Created unique index on users.email")

        # Role listings (students, counsellors)
        await users.create_index([("role", ASCENDING)], name="role_idx")
        logger.debug("Created index on users.role")

        # Counsellor-scoped student listing
        await users.create_index(
            [("role", ASCENDING), ("profile.counsellor", ASCENDING)],
            name="role_counsellor_idx"
        )
        logger.debug("Created compound index on users.role + profile.counsellor")

        user_indexes = await users.index_information()
        logger.info(f"✅ Database indexes ready: users={len(user_indexes)}")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise
