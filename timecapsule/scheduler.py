# timecapsule/scheduler.py
import atexit

import click
from apscheduler.schedulers.background import BackgroundScheduler

from .services.notification_service import NotificationDispatcher
from .services.sweep_service import SweepRunner

SWEEP_JOB_ID = "capsule_unlock_notifications"


def build_runner(app) -> SweepRunner:
    dispatcher = NotificationDispatcher(frontend_url=app.config.get("FRONTEND_URL"))
    return SweepRunner(dispatcher)


def _tick(app, runner: SweepRunner):
    with app.app_context():
        try:
            processed = runner.run()
        except Exception as e:
            app.logger.exception("Notification job error: %s", e)
            return
        if processed is not None:
            app.logger.info("Notification job completed (%s candidates)", processed)


def _shutdown(scheduler: BackgroundScheduler):
    if scheduler.running:
        scheduler.shutdown(wait=False)


def start_scheduler(app, runner: SweepRunner) -> BackgroundScheduler | None:
    existing = app.extensions.get("sweep_scheduler")
    if existing is not None and existing.running:
        return existing
    try:
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            _tick,
            "interval",
            minutes=app.config.get("NOTIFICATION_SWEEP_MINUTES", 60),
            args=(app, runner),
            id=SWEEP_JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
    except Exception as e:
        app.logger.warning("Failed to start scheduler: %s", e)
        return None

    app.extensions["sweep_scheduler"] = scheduler
    atexit.register(_shutdown, scheduler)
    app.logger.info(
        "APScheduler started; notification sweep every %s minutes.",
        app.config.get("NOTIFICATION_SWEEP_MINUTES", 60),
    )
    return scheduler


def init_scheduler(app):
    runner = build_runner(app)
    app.extensions["sweep_runner"] = runner

    @app.cli.command("sweep-notifications")
    def sweep_notifications():
        """Run one notification sweep now."""
        processed = app.extensions["sweep_runner"].run()
        if processed is None:
            click.echo("A sweep is already running; skipped.")
        else:
            click.echo(f"Processed {processed} notifications")

    return runner
