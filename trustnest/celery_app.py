"""Celery configuration for TrustNest"""
import os

from celery import Celery

from trustnest.config import Config


def create_celery_app():
    celery = Celery(
        'trustnest',
        broker=os.environ.get('REDIS_URL', 'redis://localhost:6379/0'),
        backend=os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    )

    celery.conf.update(
        task_serializer='json',
        accept_content=['json'],
        result_serializer='json',
        timezone='UTC',
        enable_utc=True,
        task_track_started=True,
        task_time_limit=300,
        task_soft_time_limit=240,
        worker_prefetch_multiplier=1,
        worker_max_tasks_per_child=100,
        beat_schedule=Config.CELERY_BEAT_SCHEDULE
    )

    return celery


celery = create_celery_app()

_flask_app = None


def get_flask_app():
    """Flask app for task context, built on first use inside the worker"""
    global _flask_app
    if _flask_app is None:
        from trustnest.app import create_app
        _flask_app = create_app()
    return _flask_app


@celery.task(name='trustnest.celery_app.lift_expired_suspensions')
def lift_expired_suspensions():
    """Re-activate accounts whose suspension period has ended"""
    app = get_flask_app()
    with app.app_context():
        count = app.extensions['services'].admin.lift_expired_suspensions()
        return f"Lifted {count} suspensions"
