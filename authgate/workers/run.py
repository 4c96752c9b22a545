import logging

from arq.worker import run_worker

from authgate.core.config import settings
from authgate.workers.worker_settings import WorkerSettings


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format=settings.LOG_FORMAT
    )
    # Worker arq berjalan sebagai proses terpisah dari API
    run_worker(WorkerSettings)


if __name__ == "__main__":
    main()
