from datetime import timedelta

from trustnest.auth.decorators import admin_only
from trustnest.errors import NotFoundError, ValidationError
from trustnest.models.audit import AuditLogEntry, AUDIT_ACTIONS
from trustnest.models.document import Document, DocumentType, ReviewStatus
from trustnest.models.flag import UserFlag, FLAG_TYPES
from trustnest.models.messaging import Message
from trustnest.models.user import User
from trustnest.models.verification import VerificationRecord, VerificationStatus
from trustnest.services.audit_service import AuditService
from trustnest.utils.helpers import utcnow
from trustnest.utils.security import sanitize_input
from trustnest.utils.validators import (
    require_choice, require_int_range, require_pagination, require_string_list, require_text
)

QUEUE_USER_TYPES = ('all', 'tenant', 'landlord')

# Document type -> verification sub-check it settles on review
REVIEWED_CHECKS = {
    DocumentType.GOVERNMENT_ID: 'id',
    DocumentType.SELFIE: 'selfie',
}


class AdminService:
    """
    Admin review workflow.

    Every public method except the scheduled ``lift_expired_suspensions`` is
    wrapped in ``admin_only`` and takes the acting admin first. Each mutating
    call stages exactly one audit entry and commits it with the change.
    """

    def __init__(self, db, logger, verification_service, messaging_service):
        self.db = db
        self.logger = logger
        self.verification_service = verification_service
        self.messaging_service = messaging_service
        self.audit = AuditService(db, logger)

    def _get_user(self, user_id):
        user = self.db.session.get(User, user_id)
        if not user:
            raise NotFoundError('User not found')
        return user

    def _get_document(self, document_id):
        document = self.db.session.get(Document, document_id)
        if not document:
            raise NotFoundError('Document not found')
        return document

    def _verification_summary(self, record):
        data = record.to_dict()
        data['user'] = record.user.to_dict()
        data['documents'] = [
            doc.to_dict() for doc in record.user.documents.order_by(Document.created_at.desc())
        ]
        return data

    @admin_only
    def get_pending_verifications(self, admin, limit=20, offset=0, user_type='all'):
        limit, offset = require_pagination(limit, offset)
        require_choice('user_type', user_type, QUEUE_USER_TYPES)

        query = VerificationRecord.query.join(
            User, VerificationRecord.user_id == User.id
        ).filter(VerificationRecord.status == VerificationStatus.PENDING)

        if user_type != 'all':
            query = query.filter(User.user_type.in_([user_type, 'both']))

        total = query.count()
        records = query.order_by(
            VerificationRecord.created_at.asc(), VerificationRecord.id.asc()
        ).offset(offset).limit(limit).all()

        return {
            'verifications': [self._verification_summary(record) for record in records],
            'total': total,
            'has_more': offset + len(records) < total
        }

    @admin_only
    def get_verification_details(self, admin, verification_id):
        record = self.verification_service.get_record(verification_id)
        data = self._verification_summary(record)
        data['flags'] = [
            flag.to_dict() for flag in record.user.flags.filter_by(is_active=True)
        ]
        data['review_notes'] = record.review_notes
        return data

    @admin_only
    def approve_verification(self, admin, verification_id, notes=None):
        return self.verification_service.approve(admin, verification_id, notes=notes)

    @admin_only
    def reject_verification(self, admin, verification_id, reason, notes=None):
        return self.verification_service.reject(admin, verification_id, reason, notes=notes)

    @admin_only
    def request_verification_info(self, admin, verification_id, message, required_documents=None):
        """Ask the user for more evidence through an in-app message"""
        message = require_text('message', message, max_length=5000)
        if required_documents is not None:
            required_documents = require_string_list('required_documents', required_documents)

        record = self.verification_service.get_record(verification_id)
        conversation = self.messaging_service.get_or_create_conversation(admin.id, record.user_id)

        content = message
        if required_documents:
            content += '\n\nRequired documents: ' + ', '.join(required_documents)

        self.db.session.add(Message(
            conversation_id=conversation.id,
            sender_id=admin.id,
            content=sanitize_input(content)
        ))
        conversation.last_message_at = utcnow()
        self.audit.append(
            admin_id=admin.id,
            action='REQUEST_VERIFICATION_INFO',
            target_user_id=record.user_id,
            target_type='verification',
            target_id=record.id,
            details={'required_documents': required_documents or []}
        )
        self.db.session.commit()
        return record

    def _review_document(self, admin, document_id, approved, reason):
        """Annotate a document; the review, its audit entry and any sub-check commit together"""
        document = self._get_document(document_id)

        def stage(record=None):
            document.review_status = ReviewStatus.APPROVED if approved else ReviewStatus.REJECTED
            document.review_reason = reason
            document.reviewed_by = admin.id
            document.reviewed_at = utcnow()

            details = {'document_type': document.document_type.value}
            if reason:
                details['reason'] = reason
            self.audit.append(
                admin_id=admin.id,
                action='APPROVE_DOCUMENT' if approved else 'REJECT_DOCUMENT',
                target_user_id=document.user_id,
                target_type='document',
                target_id=document.id,
                details=details
            )

        check = REVIEWED_CHECKS.get(document.document_type)
        if check:
            self.verification_service.record_sub_check(document.user_id, check, approved, stage=stage)
        else:
            stage()
            self.db.session.commit()
        return document

    @admin_only
    def approve_document(self, admin, document_id, notes=None):
        return self._review_document(admin, document_id, True, notes)

    @admin_only
    def reject_document(self, admin, document_id, reason):
        reason = require_text('reason', reason, max_length=2000)
        return self._review_document(admin, document_id, False, reason)

    @admin_only
    def flag_user(self, admin, user_id, flag_type, description):
        require_choice('flag_type', flag_type, FLAG_TYPES)
        description = sanitize_input(require_text('description', description, max_length=2000))
        self._get_user(user_id)

        flag = UserFlag(
            user_id=user_id,
            flag_type=flag_type,
            description=description,
            created_by=admin.id
        )
        self.db.session.add(flag)
        self.db.session.flush()
        self.audit.append(
            admin_id=admin.id,
            action='FLAG_USER',
            target_user_id=user_id,
            target_type='flag',
            target_id=flag.id,
            details={'flag_type': flag_type}
        )
        self.db.session.commit()
        return flag

    @admin_only
    def remove_user_flag(self, admin, user_id, flag_id, reason):
        reason = require_text('reason', reason, max_length=2000)
        flag = self.db.session.get(UserFlag, flag_id)
        if not flag or flag.user_id != user_id:
            raise NotFoundError('Flag not found')
        if not flag.is_active:
            raise ValidationError('Flag has already been removed')

        flag.is_active = False
        flag.removed_by = admin.id
        flag.removed_at = utcnow()
        flag.removal_reason = reason
        self.audit.append(
            admin_id=admin.id,
            action='REMOVE_USER_FLAG',
            target_user_id=user_id,
            target_type='flag',
            target_id=flag.id,
            details={'flag_type': flag.flag_type, 'reason': reason}
        )
        self.db.session.commit()
        return flag

    @admin_only
    def set_user_trust_badge(self, admin, user_id, verified, reason=None):
        return self.verification_service.set_trust_badge(admin, user_id, verified, reason=reason)

    @admin_only
    def suspend_user(self, admin, user_id, reason, duration_days=None):
        """Suspend an account; ``duration_days=None`` means until lifted by hand"""
        reason = require_text('reason', reason, max_length=2000)
        if duration_days is not None:
            duration_days = require_int_range('duration_days', duration_days, 1, 3650)
        user = self._get_user(user_id)
        if user.id == admin.id:
            raise ValidationError('Administrators cannot suspend themselves')

        now = utcnow()
        user.is_active = False
        user.suspended_at = now
        user.suspended_until = now + timedelta(days=duration_days) if duration_days else None
        user.suspension_reason = reason
        self.audit.append(
            admin_id=admin.id,
            action='SUSPEND_USER',
            target_user_id=user.id,
            target_type='user',
            target_id=user.id,
            details={'reason': reason, 'duration_days': duration_days}
        )
        self.db.session.commit()
        return user

    def _lift_suspension(self, user, admin_id, reason):
        user.is_active = True
        user.suspended_at = None
        user.suspended_until = None
        user.suspension_reason = None
        self.audit.append(
            admin_id=admin_id,
            action='UNSUSPEND_USER',
            target_user_id=user.id,
            target_type='user',
            target_id=user.id,
            details={'reason': reason}
        )

    @admin_only
    def unsuspend_user(self, admin, user_id, reason):
        reason = require_text('reason', reason, max_length=2000)
        user = self._get_user(user_id)
        if user.is_active:
            raise ValidationError('User is not suspended')

        self._lift_suspension(user, admin.id, reason)
        self.db.session.commit()
        return user

    def lift_expired_suspensions(self):
        """Scheduled job: re-activate users whose suspension has run out"""
        expired = User.query.filter(
            User.is_active.is_(False),
            User.suspended_until.isnot(None),
            User.suspended_until <= utcnow()
        ).all()

        for user in expired:
            self._lift_suspension(user, None, 'Suspension period expired')
        self.db.session.commit()

        if expired:
            self.logger.info(f"Lifted {len(expired)} expired suspensions")
        return len(expired)

    @admin_only
    def get_statistics(self, admin):
        counts = {
            status.value: VerificationRecord.query.filter_by(status=status).count()
            for status in VerificationStatus
        }

        reviewed = VerificationRecord.query.filter(
            VerificationRecord.reviewed_at.isnot(None)
        ).with_entities(VerificationRecord.created_at, VerificationRecord.reviewed_at).all()
        review_hours = [
            (reviewed_at - created_at).total_seconds() / 3600
            for created_at, reviewed_at in reviewed
            if created_at and reviewed_at
        ]
        avg_review_time = round(sum(review_hours) / len(review_hours), 2) if review_hours else 0

        flagged_users = self.db.session.query(UserFlag.user_id).filter(
            UserFlag.is_active.is_(True)
        ).distinct().count()

        recent = AuditLogEntry.query.order_by(
            AuditLogEntry.created_at.desc(), AuditLogEntry.id.desc()
        ).limit(10).all()

        return {
            'pending_verifications': counts['pending'],
            'approved_verifications': counts['approved'],
            'rejected_verifications': counts['rejected'],
            'average_review_time_hours': avg_review_time,
            'flagged_users': flagged_users,
            'recent_activity': [entry.to_dict() for entry in recent]
        }

    @admin_only
    def get_audit_logs(self, admin, limit=50, offset=0, action=None, user_id=None):
        limit, offset = require_pagination(limit, offset)

        query = AuditLogEntry.query
        if action:
            query = query.filter_by(action=require_choice('action', action, AUDIT_ACTIONS))
        if user_id is not None:
            user_id = require_int_range('user_id', user_id, 1, 2 ** 31 - 1)
            query = query.filter_by(target_user_id=user_id)

        total = query.count()
        entries = query.order_by(
            AuditLogEntry.created_at.desc(), AuditLogEntry.id.desc()
        ).offset(offset).limit(limit).all()

        return {
            'logs': [entry.to_dict() for entry in entries],
            'total': total,
            'has_more': offset + len(entries) < total
        }
