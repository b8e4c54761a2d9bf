from .clock import BackgroundTickSource, LockedTickSource, ManualTickSource, TickSubscription
from .countdown import CountdownController, percent_of
from .round import Round, RoundOutcome, RoundStatus
from .session import RoundSession, SessionRegistry, SessionStatus

__all__ = [
    'BackgroundTickSource',
    'CountdownController',
    'LockedTickSource',
    'ManualTickSource',
    'Round',
    'RoundOutcome',
    'RoundSession',
    'RoundStatus',
    'SessionRegistry',
    'SessionStatus',
    'TickSubscription',
    'percent_of',
]
