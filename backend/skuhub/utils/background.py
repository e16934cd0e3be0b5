from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from skuhub.utils.logging import get_logger

log = get_logger("skuhub.background", "BACKGROUND")

# started and stopped by the app lifespan (skuhub.main)
scheduler = BackgroundScheduler()


def submit(fn: Callable, *args, **kwargs):
    """
    Run `fn` once, as soon as possible, off the caller's thread when the
    scheduler is running. Without a running scheduler (scripts, tests) it runs
    inline. Either way the caller never sees its outcome.
    """
    if scheduler.running:
        scheduler.add_job(fn, args=args, kwargs=kwargs, misfire_grace_time=None)
        return
    try:
        fn(*args, **kwargs)
    except Exception:
        log.exception("background task %s failed", getattr(fn, "__name__", fn))
