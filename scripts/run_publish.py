import logging
import sys
from pathlib import Path

# Add project root to pythonpath
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root))

from app.config import get_settings
from app.jobs.catalog_publish import publish_catalog

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("CatalogPublisher")


def main() -> int:
    logger.info("Starting manual catalog publish...")
    try:
        result = publish_catalog()
    except Exception:
        logger.exception("Catalog publish failed")
        return 1
    logger.info("Publish finished: %s", result.model_dump())
    return 0


if __name__ == "__main__":
    sys.exit(main())
