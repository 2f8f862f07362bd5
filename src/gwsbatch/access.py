from collections.abc import Iterable

import google.auth
from google.auth.credentials import Credentials
from googleapiclient.discovery import build, Resource

from .sheets.transport import GoogleSheetsTransport

class _GWSAccess():
    """
    Builds (and caches) the Google API service objects the transports sit on.
    Credentials are the caller's business: hand them in, or leave them out and
    google.auth.default() is asked, which covers GOOGLE_APPLICATION_CREDENTIALS,
    gcloud user credentials and the metadata server on GCP.

    It makes no sense to have more than one of these per application so it is a
    module singleton, but nothing holds on to it, transports take the service
    they were built with.
    """

    __SCOPES = {
        "sheets": "https://www.googleapis.com/auth/spreadsheets",
        "sheets-ro": "https://www.googleapis.com/auth/spreadsheets.readonly",
        "drive-file": "https://www.googleapis.com/auth/drive.file",
    }
    __SCOPE_URL_PREFIX = "https://www.googleapis.com/"

    def __init__(self) -> None:
        self.reset()

    def __str__(self) -> str:
        return f"{'Connected' if self.connected else 'Disconnected'}:{str(self.__scopes)}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @classmethod
    def get_scope(cls, scope: str) -> str:
        """
        Get a scope based on simplified label.
        A raw URL will also be expected.
        """
        s = str(scope)
        sc = cls.__SCOPES.get(s, "")
        if not sc and s.startswith(cls.__SCOPE_URL_PREFIX):
            sc = s
        return sc

    def reset(self) -> None:
        """Back to defaults, no credentials and no services"""
        self.__creds = None
        self.__scopes = [self.get_scope("sheets")]
        self.__services = {}
        self.__developer_key = None

    @property
    def connected(self) -> bool:
        return self.__creds is not None

    @property
    def credentials(self) -> Credentials|None:
        return self.__creds

    @credentials.setter
    def credentials(self, value: Credentials|None) -> None:
        """New credentials invalidate any services built with the old ones"""
        self.__creds = value
        self.__services = {}

    @property
    def scopes(self) -> list[str]:
        """Scopes asked for when falling back to default credentials"""
        return self.__scopes

    @scopes.setter
    def scopes(self, value: str|Iterable[str]) -> None:
        vals = [value] if isinstance(value, str) else list(value)
        self.__scopes = [s for s in (self.get_scope(v) for v in vals) if s]

    @property
    def config(self) -> dict:
        """
        Get all configuration state as a dict.
        Convenience for getting it all at once for pushing into a json, toml, ini, etc, file.
        """
        return {'scopes': self.__scopes, 'developer_key': self.__developer_key}

    @config.setter
    def config(self, config: dict) -> None:
        """
        Set configuration state from a dict.
        Convenience method for inserting state pulled from a config file or equivalent.
        """
        v = config.get('scopes', None)
        if v:
            self.scopes = v
            self.__services = {}
        v = config.get('developer_key', None)
        if v is not None:
            self.__developer_key = str(v)
            self.__services = {}

    def connect(self) -> bool:
        """Pick up default credentials if none were given"""
        if self.__creds is None:
            self.__creds, _ = google.auth.default(scopes=self.__scopes)
            self.__services = {}
        return self.connected

    def get_service(self, name: str, version: str) -> Resource:
        """
        Build the requested service if not already available, connecting if required.
        """
        self.connect()
        id = f'{name}:{version}'
        s = self.__services.get(id, None)
        if s is None:
            s = build(name, version, credentials=self.__creds,
                      developerKey=self.__developer_key, cache_discovery=False)
            self.__services[id] = s
        return s

gws = _GWSAccess()

def sheets_transport(credentials: Credentials|None = None) -> GoogleSheetsTransport:
    """
    A GoogleSheetsTransport over the sheets v4 service, using the given
    credentials or whatever gws already has (or can find).
    """
    if credentials is not None:
        gws.credentials = credentials
    return GoogleSheetsTransport(gws.get_service("sheets", "v4"))
