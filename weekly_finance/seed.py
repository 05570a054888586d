import logging

from .crud import seed_categories
from .db import Base, SessionLocal, engine

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = seed_categories(db)
    finally:
        db.close()
    if added:
        logger.info("Seeded %d expense categories.", added)
    else:
        logger.info("Expense categories already exist. Skipping seed.")


if __name__ == "__main__":
    main()
