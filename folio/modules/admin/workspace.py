"""
Admin Workspaces
================

One AdminWorkspace per admin browser: its own backend client (and so its own
auth session), a SessionGate and a ContentManager. Only signed-in workspaces
are kept, in memory, in a WorkspaceRegistry keyed by a random id held in the
Flask session cookie; anonymous requests get a throwaway workspace.
"""

import secrets
import threading
import time
from collections import deque

from folio.core.data import DataAccess
from folio.core.logging_service import LoggingService

from .content import ContentManager
from .gate import AuthChanged, InitialCheck, SessionGate, SignInResult, SignOut


class AdminWorkspace:

    def __init__(self, backend):
        self.data = DataAccess(backend.create_client())
        self.gate = SessionGate()
        self.content = ContentManager(self.data)
        # Serialises request handlers for the same browser
        self.lock = threading.RLock()
        self.last_used = time.time()
        self.workspace_id = None
        # Refresh tokens this workspace has held, newest last
        self._held_tokens = deque(maxlen=16)
        self._subscription = None

    def start(self, refresh_token=None):
        """Subscribe to auth changes, then run the initial session check once"""
        if self._subscription is None:
            self._subscription = self.data.on_auth_state_change(self._on_auth_change).data
        if not self.gate.is_loading:
            return

        session = None
        if refresh_token:
            session = self.data.restore_session(refresh_token).data
        if session is None:
            session = self.data.get_session().data
        self.apply(InitialCheck(session))

    def apply(self, event):
        """Feed one event to the gate and act on the transition"""
        transition = self.gate.transition(event)
        if self.refresh_token and self.refresh_token not in self._held_tokens:
            self._held_tokens.append(self.refresh_token)
        if transition.clear_required:
            self.content.clear()
        if transition.fetch_required:
            self.content.load()
        return transition

    def _on_auth_change(self, event, session):
        LoggingService.debug('admin', f"Auth event {event}")
        self.apply(AuthChanged(event, session))

    def adopt_refresh_token(self, refresh_token):
        """Take over a newer refresh token rotated by another server process"""
        if not (self.gate.is_authenticated and refresh_token):
            return
        # An older cookie from a request that raced a refresh
        if refresh_token in self._held_tokens:
            return
        self.data.adopt_refresh_token(refresh_token)
        self._held_tokens.append(refresh_token)

    def check_session(self):
        """Re-read the session; an expired one is refreshed or signs the workspace out"""
        if self.gate.is_authenticated:
            self.data.get_session()

    def sign_in(self, email, password):
        result = self.data.sign_in(email, password)
        self.apply(SignInResult(result.data, result.error))
        if result.ok:
            LoggingService.log_user_action('admin', 'sign in', user_id=email)
        return result

    def sign_out(self):
        result = self.data.sign_out()
        self.apply(SignOut())
        return result

    @property
    def refresh_token(self):
        session = self.gate.session
        return session.refresh_token if session is not None else None

    def close(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None


class WorkspaceRegistry:
    """In-process store of signed-in admin workspaces"""

    def __init__(self, backend, idle_seconds=12 * 60 * 60):
        self.backend = backend
        self.idle_seconds = idle_seconds
        self._workspaces = {}
        self._lock = threading.Lock()

    def get(self, workspace_id):
        if not workspace_id:
            return None
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
        if workspace is not None:
            workspace.last_used = time.time()
        return workspace

    def create(self):
        """A new workspace, not yet stored"""
        return AdminWorkspace(self.backend)

    def register(self, workspace):
        """Store a signed-in workspace and return its id"""
        self._prune()
        workspace_id = secrets.token_urlsafe(24)
        with self._lock:
            self._workspaces[workspace_id] = workspace
        workspace.workspace_id = workspace_id
        return workspace_id

    def discard(self, workspace_id):
        with self._lock:
            workspace = self._workspaces.pop(workspace_id, None)
        if workspace is not None:
            workspace.workspace_id = None
            workspace.close()

    def __len__(self):
        with self._lock:
            return len(self._workspaces)

    def _prune(self):
        cutoff = time.time() - self.idle_seconds
        with self._lock:
            stale = [key for key, ws in self._workspaces.items() if ws.last_used < cutoff]
            for key in stale:
                workspace = self._workspaces.pop(key)
                workspace.workspace_id = None
                workspace.close()
        if stale:
            LoggingService.info('admin', f"Dropped {len(stale)} idle admin workspaces")
