from datetime import timedelta

from trustnest import celery_app
from trustnest.extensions import db
from trustnest.utils.helpers import utcnow


def test_beat_runs_suspension_job_hourly():
    entry = celery_app.celery.conf.beat_schedule['lift-expired-suspensions']

    assert entry['task'] == celery_app.lift_expired_suspensions.name
    assert entry['schedule'] == timedelta(hours=1)


def test_task_lifts_expired_suspensions(app, services, user, admin, monkeypatch):
    services.admin.suspend_user(admin, user.id, 'Cooling off', duration_days=1)
    user.suspended_until = utcnow() - timedelta(seconds=5)
    db.session.commit()
    monkeypatch.setattr(celery_app, '_flask_app', app)

    assert celery_app.lift_expired_suspensions() == 'Lifted 1 suspensions'

    db.session.refresh(user)
    assert user.is_active is True
