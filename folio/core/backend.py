"""
Hosted Backend Client
=====================

Thin HTTP client for the hosted row-storage and auth service (a Supabase
project: PostgREST under /rest/v1, GoTrue under /auth/v1).

BackendConfig is built once at process start and shared. Each call to
create_client() returns a BackendClient with its own auth session, so every
admin browser can sign in independently while reusing one HTTP session.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from .config import get_config_value

logger = logging.getLogger(__name__)

# Refresh a little before the backend considers the token expired
EXPIRY_MARGIN_SECONDS = 10

SIGNED_IN = 'SIGNED_IN'
SIGNED_OUT = 'SIGNED_OUT'
TOKEN_REFRESHED = 'TOKEN_REFRESHED'


class BackendError(Exception):
    """Any failure talking to the backend: HTTP error, transport error, bad payload"""

    def __init__(self, message, code=None, status=None, details=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details

    def __str__(self):
        return self.message

    @classmethod
    def from_response(cls, response):
        """Build an error from a failed response, keeping the backend's own message"""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        message = None
        code = None
        details = None
        if isinstance(payload, dict):
            # PostgREST uses message/code, GoTrue uses msg or error_description/error
            message = (payload.get('message') or payload.get('msg')
                       or payload.get('error_description') or payload.get('error'))
            code = payload.get('code') or payload.get('error_code')
            details = payload.get('details') or payload.get('hint')
        if not message:
            message = f"Backend request failed with status {response.status_code}"
        return cls(str(message), code=code, status=response.status_code, details=details)


class Session:
    """An authenticated session issued by the backend"""

    def __init__(self, access_token, refresh_token, expires_at=None, user=None):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expires_at = expires_at
        self.user = user or {}

    @classmethod
    def from_payload(cls, payload):
        if not isinstance(payload, dict) or not payload.get('access_token'):
            raise BackendError("Invalid session payload from backend")

        expires_at = payload.get('expires_at')
        if expires_at is None and payload.get('expires_in') is not None:
            expires_at = time.time() + float(payload['expires_in'])

        return cls(
            access_token=payload['access_token'],
            refresh_token=payload.get('refresh_token'),
            expires_at=expires_at,
            user=payload.get('user') or {},
        )

    @property
    def expired(self):
        if self.expires_at is None:
            return False
        return time.time() >= float(self.expires_at) - EXPIRY_MARGIN_SECONDS

    @property
    def email(self):
        return self.user.get('email')

    def __repr__(self):
        return f"<Session user={self.email!r} expires_at={self.expires_at!r}>"


class BackendConfig:
    """Endpoint, key and HTTP session for the hosted backend"""

    def __init__(self, url: str, api_key: str, timeout: Optional[float] = None,
                 http: Optional[requests.Session] = None):
        if not url or not api_key:
            raise ValueError("Backend URL and API key are required")
        self.url = url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    @classmethod
    def from_app_config(cls):
        """Build from BACKEND_URL / BACKEND_API_KEY / BACKEND_TIMEOUT"""
        timeout = get_config_value('BACKEND_TIMEOUT')
        return cls(
            url=get_config_value('BACKEND_URL'),
            api_key=get_config_value('BACKEND_API_KEY'),
            timeout=float(timeout) if timeout else None,
        )

    def create_client(self) -> 'BackendClient':
        return BackendClient(self)

    def request(self, method: str, path: str, params=None, json=None,
                headers: Optional[Dict[str, str]] = None, token: Optional[str] = None):
        """
        Send one request and return the decoded JSON body (None when empty).

        Raises BackendError for transport failures, error statuses and
        undecodable bodies.
        """
        request_headers = {
            'apikey': self.api_key,
            'Authorization': f"Bearer {token or self.api_key}",
            'Content-Type': 'application/json',
        }
        if headers:
            request_headers.update(headers)

        url = f"{self.url}{path}"
        try:
            response = self.http.request(
                method, url,
                params=params,
                json=json,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise BackendError(f"Could not reach backend: {e}") from e

        if response.status_code >= 400:
            raise BackendError.from_response(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendError("Backend returned invalid JSON", status=response.status_code) from e


def _format_filter_value(value):
    if value is True:
        return 'true'
    if value is False:
        return 'false'
    return str(value)


class Query:
    """
    Chainable query against one table.

        client.table('projects').select('*').eq('is_visible', True) \\
            .order('display_order').execute()
    """

    def __init__(self, client: 'BackendClient', table: str):
        self._client = client
        self._table = table
        self._method = 'GET'
        self._body = None
        self._columns = None
        self._filters: List[tuple] = []
        self._order = None
        self._single = False

    def select(self, columns='*'):
        self._columns = columns
        return self

    def insert(self, values):
        self._method = 'POST'
        self._body = values
        return self

    def update(self, values):
        self._method = 'PATCH'
        self._body = values
        return self

    def delete(self):
        self._method = 'DELETE'
        return self

    def eq(self, column, value):
        if value is None:
            self._filters.append((column, 'is.null'))
        else:
            self._filters.append((column, f"eq.{_format_filter_value(value)}"))
        return self

    def order(self, column, ascending=True):
        self._order = f"{column}.{'asc' if ascending else 'desc'}"
        return self

    def single(self):
        """Expect exactly one row; zero or several rows is an error"""
        self._single = True
        return self

    def execute(self):
        """Run the query: a row dict in single mode, else a list of rows"""
        if self._method in ('PATCH', 'DELETE') and not self._filters:
            raise BackendError(f"Refusing unfiltered {self._method} on {self._table}")

        params = list(self._filters)
        if self._columns:
            params.append(('select', self._columns))
        if self._order:
            params.append(('order', self._order))

        headers = {}
        if self._method != 'GET':
            returning = self._columns is not None
            headers['Prefer'] = 'return=representation' if returning else 'return=minimal'

        data = self._client.request(
            self._method, f"/rest/v1/{self._table}",
            params=params, json=self._body, headers=headers,
        )

        rows = data if isinstance(data, list) else ([] if data is None else [data])
        if self._single:
            if len(rows) != 1:
                raise BackendError(
                    f"JSON object requested, {len(rows)} rows returned from {self._table}",
                    code='PGRST116', status=406,
                )
            return rows[0]
        return rows


class Subscription:
    """Handle returned by on_auth_state_change"""

    def __init__(self, auth: 'AuthClient', callback: Callable[[str, Optional[Session]], None]):
        self._auth = auth
        self.callback = callback

    def unsubscribe(self):
        self._auth._remove(self)


class AuthClient:
    """Password auth against the backend, holding one session"""

    def __init__(self, config: BackendConfig):
        self._config = config
        self._session: Optional[Session] = None
        self._subscriptions: List[Subscription] = []
        self._lock = threading.RLock()

    @property
    def current_session(self) -> Optional[Session]:
        return self._session

    def sign_in_with_password(self, email: str, password: str) -> Session:
        payload = self._config.request(
            'POST', '/auth/v1/token',
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
        )
        session = Session.from_payload(payload)
        with self._lock:
            self._session = session
        self._emit(SIGNED_IN, session)
        return session

    def sign_out(self):
        """Drop the local session even when the backend call fails"""
        with self._lock:
            session = self._session
            self._session = None
        try:
            if session is not None:
                self._config.request('POST', '/auth/v1/logout', token=session.access_token)
        finally:
            if session is not None:
                self._emit(SIGNED_OUT, None)

    def get_session(self) -> Optional[Session]:
        """Current session, refreshed first when its access token has expired"""
        session = self._session
        if session is None:
            return None
        if session.expired:
            return self._refresh(session.refresh_token)
        return session

    def restore_session(self, refresh_token: str) -> Session:
        """Exchange a stored refresh token for a fresh session"""
        return self._refresh(refresh_token)

    def adopt_refresh_token(self, refresh_token: str):
        """Use a newer refresh token for the next refresh of the current session"""
        with self._lock:
            if self._session is not None:
                self._session.refresh_token = refresh_token

    def on_auth_state_change(self, callback) -> Subscription:
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _refresh(self, refresh_token) -> Session:
        had_session = self._session is not None
        try:
            if not refresh_token:
                raise BackendError("No refresh token available")
            payload = self._config.request(
                'POST', '/auth/v1/token',
                params={'grant_type': 'refresh_token'},
                json={'refresh_token': refresh_token},
            )
            session = Session.from_payload(payload)
        except BackendError:
            with self._lock:
                self._session = None
            if had_session:
                self._emit(SIGNED_OUT, None)
            raise

        with self._lock:
            self._session = session
        self._emit(TOKEN_REFRESHED if had_session else SIGNED_IN, session)
        return session

    def _remove(self, subscription):
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _emit(self, event, session):
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            try:
                subscription.callback(event, session)
            except Exception:
                logger.exception(f"Auth listener failed handling {event}")


class BackendClient:
    """Row queries and auth for one caller"""

    def __init__(self, config: BackendConfig):
        self.config = config
        self.auth = AuthClient(config)

    def table(self, name: str) -> Query:
        return Query(self, name)

    def request(self, method, path, **kwargs) -> Any:
        """Row request carrying the signed-in user's token when there is one"""
        session = self.auth.current_session
        token = session.access_token if session else None
        return self.config.request(method, path, token=token, **kwargs)
