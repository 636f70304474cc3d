from trustnest.models.user import User
from trustnest.models.profile import UserProfile
from trustnest.models.match import Match, MatchStatus
from trustnest.models.verification import (
    VerificationRecord, VerificationStatus, TrustBadge, DecisionSource, SUB_CHECKS
)
from trustnest.models.document import Document, DocumentType, ReviewStatus
from trustnest.models.audit import AuditLogEntry
from trustnest.models.flag import UserFlag
from trustnest.models.messaging import Conversation, Message
from trustnest.models.property import Property, PropertyStatus

__all__ = [
    'User', 'UserProfile',
    'Match', 'MatchStatus',
    'VerificationRecord', 'VerificationStatus', 'TrustBadge', 'DecisionSource', 'SUB_CHECKS',
    'Document', 'DocumentType', 'ReviewStatus',
    'AuditLogEntry', 'UserFlag',
    'Conversation', 'Message',
    'Property', 'PropertyStatus'
]
