"""
Identity verification lifecycle and trust badge.

A VerificationRecord carries four independent sub-checks (email, phone,
government ID, selfie) plus a status and a trust badge. Status and badge are
never written directly: every change goes through ``apply_trust_state`` with
the event that caused it, and the most recent decisive event wins:

- a sub-check write that completes all four checks approves the record
  automatically (self-service verification); re-sending a check that is
  already true does not undo an admin rejection;
- an admin approval or rejection overrides whatever the checks say;
- a sub-check write that breaks an automatic approval drops the record back
  to pending, while an admin decision survives later sub-check writes.

Writes are serialized per user: the record row is locked for the
read-evaluate-write and the mapper's version counter turns a lost update into
StaleDataError, which is retried.
"""
from enum import Enum

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from trustnest.auth.decorators import admin_only
from trustnest.errors import DependencyError, NotFoundError, TrustNestError, ValidationError
from trustnest.models.user import User
from trustnest.models.verification import (
    VerificationRecord, VerificationStatus, TrustBadge, DecisionSource, SUB_CHECKS
)
from trustnest.services.audit_service import AuditService
from trustnest.utils.helpers import utcnow, clean_phone_number
from trustnest.utils.logging_config import log_user_action
from trustnest.utils.validators import validate_email, validate_phone, validate_otp, require_text

MAX_PHONE_OTP_ATTEMPTS = 5
MAX_WRITE_ATTEMPTS = 3


class VerificationEvent(Enum):
    SUB_CHECK = 'sub_check'
    ADMIN_APPROVE = 'admin_approve'
    ADMIN_REJECT = 'admin_reject'


def apply_trust_state(record, event, was_complete=False):
    """
    Re-derive status, trust badge and decision source after ``event``.

    ``was_complete`` is whether all four checks were already true before the
    write; an admin decision only yields to checks that have just completed.
    """
    if event is VerificationEvent.ADMIN_APPROVE:
        record.status = VerificationStatus.APPROVED
        record.trust_badge = TrustBadge.VERIFIED
        record.decision_source = DecisionSource.ADMIN
    elif event is VerificationEvent.ADMIN_REJECT:
        record.status = VerificationStatus.REJECTED
        record.trust_badge = TrustBadge.NOT_VERIFIED
        record.decision_source = DecisionSource.ADMIN
    elif record.all_checks_complete:
        if was_complete and record.decision_source is DecisionSource.ADMIN:
            return record
        record.status = VerificationStatus.APPROVED
        record.trust_badge = TrustBadge.VERIFIED
        record.decision_source = DecisionSource.AUTO
    elif record.decision_source is DecisionSource.AUTO:
        record.status = VerificationStatus.PENDING
        record.trust_badge = TrustBadge.NOT_VERIFIED
        record.decision_source = DecisionSource.NONE
    return record


class VerificationService:
    def __init__(self, db, logger, cache=None):
        self.db = db
        self.logger = logger
        self.cache = cache
        self.audit = AuditService(db, logger)

    @staticmethod
    def _cache_key(user_id):
        return f"verification_status:{user_id}"

    def _invalidate(self, user_id):
        if self.cache is not None:
            self.cache.delete(self._cache_key(user_id))

    def _require_user(self, user_id):
        user = self.db.session.get(User, user_id)
        if not user:
            raise NotFoundError('User not found')
        return user

    def _new_record(self, user_id):
        return VerificationRecord(
            user_id=user_id,
            status=VerificationStatus.PENDING,
            trust_badge=TrustBadge.NOT_VERIFIED,
            decision_source=DecisionSource.NONE,
            email_verified=False,
            phone_verified=False,
            id_verified=False,
            selfie_verified=False,
            phone_otp_attempts=0
        )

    def _locked_record(self, user_id):
        """Load the user's record FOR UPDATE, creating it on first touch"""
        record = VerificationRecord.query.filter_by(user_id=user_id).with_for_update().first()
        if record:
            return record

        self._require_user(user_id)
        record = self._new_record(user_id)
        self.db.session.add(record)
        try:
            self.db.session.flush()
        except IntegrityError:
            # Another request created it first; nothing else is staged yet
            self.db.session.rollback()
            record = VerificationRecord.query.filter_by(user_id=user_id).with_for_update().first()
            if not record:
                raise DependencyError('Could not create verification record')
        return record

    def _transition(self, user_id, event, mutate=None, audit=None):
        """
        Run one serialized read-evaluate-write on the user's record.

        ``mutate`` edits the locked record, the trust state is re-derived and
        the optional audit entry is staged; all of it commits together.
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                record = self._locked_record(user_id)
                was_complete = record.all_checks_complete
                if mutate:
                    mutate(record)
                apply_trust_state(record, event, was_complete)
                if audit:
                    self.audit.append(
                        target_user_id=user_id,
                        target_type='verification',
                        target_id=record.id,
                        **audit
                    )
                self.db.session.commit()
            except StaleDataError:
                self.db.session.rollback()
                self.logger.warning(
                    f"Concurrent update on verification for user {user_id}, retry {attempt}/{MAX_WRITE_ATTEMPTS}"
                )
                continue
            except (TrustNestError, SQLAlchemyError):
                self.db.session.rollback()
                raise

            self._invalidate(user_id)
            return record

        raise DependencyError('Verification record is busy, please retry')

    def get_or_create_record(self, user_id):
        record = VerificationRecord.query.filter_by(user_id=user_id).first()
        if record:
            return record

        self._require_user(user_id)
        record = self._new_record(user_id)
        self.db.session.add(record)
        try:
            self.db.session.commit()
        except IntegrityError:
            self.db.session.rollback()
            record = VerificationRecord.query.filter_by(user_id=user_id).first()
        return record

    def get_record(self, verification_id):
        record = self.db.session.get(VerificationRecord, verification_id)
        if not record:
            raise NotFoundError('Verification not found')
        return record

    def get_status(self, user_id):
        """
        Current verification state as a dict, served from cache when possible.

        Cached entries carry the record version they were built from and are
        only served while it is still the current one, so a read racing a
        write cannot pin a stale badge.
        """
        key = self._cache_key(user_id)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached:
                current = self.db.session.query(VerificationRecord.version).filter_by(
                    user_id=user_id
                ).scalar()
                if cached.get('version') == current:
                    return cached['status']

        record = self.get_or_create_record(user_id)
        status = record.to_dict()
        if self.cache is not None:
            self.cache.set(key, {'version': record.version, 'status': status})
        return status

    def record_sub_check(self, user_id, check, value=True, stage=None):
        """
        Set one sub-check and re-derive the trust badge.

        ``stage`` is called with the locked record to add rows that must
        commit together with the check, such as the uploaded document.
        """
        if check not in SUB_CHECKS:
            raise ValidationError(
                f"Unknown verification check: {check}",
                details={'allowed': list(SUB_CHECKS)}
            )
        if not isinstance(value, bool):
            raise ValidationError('Check value must be true or false')

        def mutate(record):
            setattr(record, f'{check}_verified', value)
            setattr(record, f'{check}_verified_at', utcnow() if value else None)
            if stage:
                stage(record)

        record = self._transition(user_id, VerificationEvent.SUB_CHECK, mutate)
        log_user_action(self.logger, user_id, f'verification.{check}', {
            'value': value,
            'trust_badge': record.trust_badge.value
        })
        return record

    def verify_email(self, user_id, email):
        # TODO: send a real confirmation link once the mail provider is wired in
        if not validate_email(email):
            raise ValidationError('Invalid email address', details={'field': 'email'})
        return self.record_sub_check(user_id, 'email')

    def verify_phone_otp(self, user_id, phone_number, otp):
        """
        Accept a phone OTP submission.

        MAX_PHONE_OTP_ATTEMPTS is a lifetime cap on submissions per user,
       
        successful ones included.
        """
        if not validate_phone(phone_number):
            raise ValidationError('Invalid phone number', details={'field': 'phone_number'})
        if not validate_otp(otp):
            raise ValidationError('OTP must be 6 digits', details={'field': 'otp'})

        def mutate(record):
            if record.phone_otp_attempts >= MAX_PHONE_OTP_ATTEMPTS:
                raise ValidationError(
                    'Too many OTP attempts',
                    details={'max_attempts': MAX_PHONE_OTP_ATTEMPTS}
                )
            record.phone_otp_attempts += 1
            record.phone_verified = True
            record.phone_verified_at = utcnow()
            record.user.phone = clean_phone_number(phone_number)

        record = self._transition(user_id, VerificationEvent.SUB_CHECK, mutate)
        log_user_action(self.logger, user_id, 'verification.phone', {
            'attempts': record.phone_otp_attempts,
            'trust_badge': record.trust_badge.value
        })
        return record

    def _admin_decision(self, admin, user_id, approve, action, reason=None, notes=None, details=None):
        now = utcnow()

        def mutate(record):
            record.reviewed_by = admin.id
            record.reviewed_at = now
            record.review_notes = notes
            record.rejection_reason = None if approve else reason

        audit_details = dict(details or {})
        if reason:
            audit_details['reason'] = reason
        if notes:
            audit_details['notes'] = notes

        event = VerificationEvent.ADMIN_APPROVE if approve else VerificationEvent.ADMIN_REJECT
        return self._transition(user_id, event, mutate, audit={
            'admin_id': admin.id,
            'action': action,
            'details': audit_details
        })

    @admin_only
    def approve(self, admin, verification_id, notes=None):
        """Admin override: approve regardless of sub-check completeness"""
        record = self.get_record(verification_id)
        return self._admin_decision(admin, record.user_id, True, 'APPROVE_VERIFICATION', notes=notes)

    @admin_only
    def reject(self, admin, verification_id, reason, notes=None):
        reason = require_text('reason', reason, max_length=2000)
        record = self.get_record(verification_id)
        return self._admin_decision(admin, record.user_id, False, 'REJECT_VERIFICATION',
                                    reason=reason, notes=notes)

    @admin_only
    def set_trust_badge(self, admin, user_id, verified, reason=None):
        """Force the badge on or off for a user, recorded as SET_TRUST_BADGE"""
        if not isinstance(verified, bool):
            raise ValidationError('verified must be true or false', details={'field': 'verified'})
        if not verified:
            reason = require_text('reason', reason, max_length=2000)
        self._require_user(user_id)
        return self._admin_decision(
            admin, user_id, verified, 'SET_TRUST_BADGE',
            reason=reason,
            details={'badge': TrustBadge.VERIFIED.value if verified else TrustBadge.NOT_VERIFIED.value}
        )
