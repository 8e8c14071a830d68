"""
Script chạy migration với Alembic.

    python migrate.py                 # upgrade head
    python migrate.py revision "msg"  # autogenerate rồi upgrade
"""

import sys
import logging
import subprocess

# Thiết lập logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def migrate(message=None):
    """Chạy migration với Alembic"""
    try:
        if message:
            logger.info(f"Tạo migration mới: {message}")
            subprocess.run(["alembic", "revision", "--autogenerate", "-m", message], check=True)

        logger.info("Áp dụng migration...")
        subprocess.run(["alembic", "upgrade", "head"], check=True)
        logger.info("Migration completed successfully!")
    except subprocess.CalledProcessError as e:
        logger.error(f"Migration failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) >= 3 and sys.argv[1] == "revision":
        migrate(sys.argv[2])
    else:
        migrate()
