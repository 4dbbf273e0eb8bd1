"""
ZenDoggo — tasks, habits and routines.
Entry point: wires the stores, runs a startup load through the worker pool,
and owns the store lifecycle. Screens plug in on top of the same objects.
"""

import logging
import sys
from datetime import date, timedelta
from pathlib import Path

# Ensure zendoggo is importable
sys.path.insert(0, str(Path(__file__).resolve().parent))

from PySide6.QtCore import QCoreApplication, QTimer

from zendoggo.bootstrap import open_stores
from zendoggo.config import load_config
from zendoggo.data.models import RoutineType
from zendoggo.logging_setup import setup_logging
from zendoggo.services.calendar_service import CalendarService
from zendoggo.services.routine_service import RoutineService
from zendoggo.services.worker import StoreWorker


def main() -> int:
    config = load_config()
    setup_logging(config["log_file"], config["log_level"])
    logger = logging.getLogger(__name__)
    logger.info("Starting ZenDoggo (backend=%s)...", config["backend"])

    app = QCoreApplication(sys.argv)
    app.setApplicationName("ZenDoggo")

    stores = open_stores(config)
    worker = StoreWorker(config["worker_threads"])
    routine_svc = RoutineService(stores.routines, stores.tasks, stores.habits)
    calendar_svc = CalendarService(stores.days)

    def show_routines(routines) -> None:
        for rtype in RoutineType:
            of_type = [r for r in routines if r.type == rtype]
            logger.info("%-9s %d routine(s): %s", rtype.name, len(of_type),
                        ", ".join(r.name for r in of_type) or "-")
        today = date.today()
        planned = calendar_svc.assign_routines(today, routines)
        week = calendar_svc.progress_summary(today - timedelta(days=6), today)
        logger.info("Today %.0f%% done; 7-day mean %.0f%%, %d full day(s)",
                    planned.progress * 100,
                    week["mean_progress"] * 100, week["completed_days"])
        app.quit()

    def load_failed(exc: BaseException) -> None:
        logger.error("Startup load failed: %s", exc)
        app.exit(1)

    QTimer.singleShot(0, lambda: worker.submit(
        routine_svc.routines_for, on_result=show_routines, on_error=load_failed,
    ))

    try:
        code = app.exec()
    finally:
        worker.shutdown()
        stores.close()
    logger.info("ZenDoggo stopped.")
    return code


if __name__ == "__main__":
    sys.exit(main())


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The composition root in action: load config, set up logging, build the
#   stores once, hand them to services, run the Qt event loop, then close
#   the database on the way out.
#
# Key points:
#   - The Database is created here (via open_stores) and closed here. No
#     store opens its own connection behind anyone's back.
#   - The first load goes through StoreWorker, the same path a window would
#     use, and its result arrives back on the event-loop thread.
#   - The loaded routines are planned onto today through CalendarService,
#     which logs the past week's progress summary.
