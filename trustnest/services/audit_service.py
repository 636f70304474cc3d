from trustnest.models.audit import AuditLogEntry, AUDIT_ACTIONS
from trustnest.utils.logging_config import log_audit


class AuditService:
    """
    Append-only audit sink.

    ``append`` only stages the entry on the session; the caller's commit
    makes it visible together with the state change it describes.
    """

    def __init__(self, db, logger):
        self.db = db
        self.logger = logger

    def append(self, admin_id, action, target_user_id=None, target_type=None,
               target_id=None, details=None):
        if action not in AUDIT_ACTIONS:
            raise ValueError(f'Unknown audit action: {action}')

        entry = AuditLogEntry(
            admin_id=admin_id,
            action=action,
            target_user_id=target_user_id,
            target_type=target_type,
            target_id=target_id,
            details=details or {}
        )
        self.db.session.add(entry)
        log_audit(self.logger, admin_id, action, {
            'target_user_id': target_user_id,
            'target_type': target_type,
            'target_id': target_id,
            **(details or {})
        })
        return entry
