# circulation/tasks/scheduler.py
from __future__ import annotations

import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


def start_scheduler(app):
    """
    Starts the late-check job in a background scheduler.
    - Skipped when SCHEDULER_ENABLED is off (tests, one-off scripts).
    - Skipped in the Werkzeug reloader's watcher process so the job runs once.
    """
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("[scheduler] disabled by config.")
        return None

    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    from circulation.tasks.late_check import run_late_check_job

    minutes = app.config.get("LATE_CHECK_INTERVAL_MINUTES", 10)
    scheduler = BackgroundScheduler(timezone="UTC")

    def _job_wrapper():
        try:
            run_late_check_job(app)
        except Exception as ex:
            app.logger.exception(f"[scheduler] late_check_job error: {ex}")

    scheduler.add_job(
        func=_job_wrapper,
        trigger=IntervalTrigger(minutes=minutes),
        id="late_check_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120
    )

    scheduler.start()
    app.logger.info(f"[scheduler] Late check job started (every {minutes} minutes).")

    app.extensions["apscheduler"] = scheduler
    return scheduler
