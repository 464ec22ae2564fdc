from .credentials import InMemoryCredentialStore
from .strava import StravaClientFake
from .telegram import NotifierSpy

__all__ = ["InMemoryCredentialStore", "NotifierSpy", "StravaClientFake"]
