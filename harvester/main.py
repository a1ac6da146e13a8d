import logging
import sys

from harvester import application

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_HALTED = 2


def main() -> int:
    try:
        result = application.run()
    except Exception:
        # Configuration and checkpoint store problems end up here and stop the process
        logger.exception("Harvester failed")
        return EXIT_FATAL

    if not result.completed:
        logger.error("Harvest halted on %s", result.halted_on)
        return EXIT_HALTED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
