import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from harvester.config import get_config
from harvester.container import get_checkpoint_store, get_date_cursor_service, setup_container
from harvester.models.harvest.dto import HarvestResult
from harvester.stats import setup_stats

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging() -> None:
    config = get_config()
    loglevel = logging.getLevelName(config.app.loglevel.upper())

    if isinstance(loglevel, str):
        raise ValueError(f"Invalid loglevel {loglevel.upper()}")
    logging.basicConfig(
        level=loglevel,
        format=LOG_FORMAT,
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    if config.app.log_file is not None:
        Path(config.app.log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            config.app.log_file,
            when="midnight",
            backupCount=config.app.log_retention_days,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%m/%d/%Y %I:%M:%S %p"))
        logging.getLogger().addHandler(handler)


def application_init() -> None:
    config = get_config()
    setup_logging()
    if config.stats.enabled:
        setup_stats(config.stats)
    setup_container()


def run() -> HarvestResult:
    application_init()
    config = get_config()
    logger.info(
        "Harvesting encounters from %s to %s", config.harvest.start_date, config.harvest.end_date
    )

    store = get_checkpoint_store()
    try:
        result = get_date_cursor_service().run()
        logger.info(
            "Harvest finished: %d days processed, %d published, %d quarantined",
            len(result.days),
            result.published,
            result.quarantined,
        )
        logger.info(
            "Quarantine totals: %d unprocessed dates, %d invalid encounters",
            len(store.get_unprocessed_dates()),
            len(store.get_invalid_encounters()),
        )
        return result
    finally:
        store.close()
