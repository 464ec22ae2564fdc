from .credential import Credential
from .responses import AuthorizationLink, AuthorizedAthlete, OperationStatus
from .strava import ActivityDetail, ActivityEvent, AthleteSummary, TokenGrant

__all__ = [
    'ActivityDetail',
    'ActivityEvent',
    'AthleteSummary',
    'AuthorizationLink',
    'AuthorizedAthlete',
    'Credential',
    'OperationStatus',
    'TokenGrant',
]
