"""
Admin Session Gate
==================

Explicit authentication state for one admin workspace.

    LOADING ──initial check──> AUTHENTICATED | UNAUTHENTICATED
    UNAUTHENTICATED <──auth events / sign-in / sign-out──> AUTHENTICATED

Every input goes through SessionGate.transition(), so the initial session
check and the auth-change subscription always agree on the state.
"""

from collections import namedtuple
from enum import Enum


class AuthState(Enum):
    LOADING = 'loading'
    UNAUTHENTICATED = 'unauthenticated'
    AUTHENTICATED = 'authenticated'


# Events
InitialCheck = namedtuple('InitialCheck', ['session'])
AuthChanged = namedtuple('AuthChanged', ['event', 'session'])
SignInResult = namedtuple('SignInResult', ['session', 'error'])


class SignOut:
    """The admin pressed sign out"""

    def __repr__(self):
        return 'SignOut()'


# What the caller has to do after a transition
Transition = namedtuple('Transition', ['previous', 'state', 'fetch_required', 'clear_required'])


class SessionGate:

    def __init__(self):
        self.state = AuthState.LOADING
        self.session = None
        self.error = None

    @property
    def is_authenticated(self):
        return self.state is AuthState.AUTHENTICATED

    @property
    def is_loading(self):
        return self.state is AuthState.LOADING

    def transition(self, event):
        previous = self.state

        if isinstance(event, SignInResult):
            if event.error or event.session is None:
                # Failed sign-in never changes the state
                self.error = event.error or 'Sign in failed'
                return Transition(previous, previous, False, False)
            session = event.session
        elif isinstance(event, (InitialCheck, AuthChanged)):
            session = event.session
        elif isinstance(event, SignOut):
            session = None
        else:
            raise TypeError(f"Unknown auth event: {event!r}")

        if session is not None:
            self.state = AuthState.AUTHENTICATED
            self.session = session
            self.error = None
        else:
            self.state = AuthState.UNAUTHENTICATED
            self.session = None

        entered = self.state is AuthState.AUTHENTICATED and previous is not AuthState.AUTHENTICATED
        left = previous is AuthState.AUTHENTICATED and self.state is not AuthState.AUTHENTICATED
        return Transition(
            previous=previous,
            state=self.state,
            fetch_required=entered,
            clear_required=left or isinstance(event, SignOut),
        )
