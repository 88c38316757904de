from models.application import APPLICATION_STATUSES, APPLICATION_TYPES, Application
from models.estimate import ANNOUNCEMENT_TYPES, ESTIMATE_TYPES, LEGACY_ESTIMATE_TYPE, Estimate, QuoteAnnouncement
from models.review import REVIEW_SERVICE_TYPES, REVIEW_STATUSES, Review
from models.user import User

__all__ = [
    "Application",
    "APPLICATION_STATUSES",
    "APPLICATION_TYPES",
    "Estimate",
    "ESTIMATE_TYPES",
    "LEGACY_ESTIMATE_TYPE",
    "ANNOUNCEMENT_TYPES",
    "QuoteAnnouncement",
    "Review",
    "REVIEW_SERVICE_TYPES",
    "REVIEW_STATUSES",
    "User",
]
