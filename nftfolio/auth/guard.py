"""
Route guard: a pure decision over session state.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .schemas import Role, role_satisfies
from .session import SessionState, SessionStore


class GuardAction(str, enum.Enum):
    RENDER = "render"
    WAIT = "wait"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    redirect_to: str | None = None

    @property
    def should_render(self) -> bool:
        return self.action is GuardAction.RENDER


def guard_route(
    state: SessionState,
    role: Role | None,
    *,
    required_role: Role | None = None,
    login_route: str = "/auth",
    default_route: str = "/",
) -> GuardDecision:
    if state in (SessionState.UNKNOWN, SessionState.LOADING):
        # Render nothing until the session read settles.
        return GuardDecision(GuardAction.WAIT)
    if state is SessionState.ANONYMOUS or role is None:
        return GuardDecision(GuardAction.REDIRECT, login_route)
    if required_role is not None and not role_satisfies(role, required_role):
        return GuardDecision(GuardAction.REDIRECT, default_route)
    return GuardDecision(GuardAction.RENDER)


def guard_session(
    session: SessionStore,
    *,
    required_role: Role | None = None,
    login_route: str = "/auth",
    default_route: str = "/",
) -> GuardDecision:
    return guard_route(
        session.state,
        session.role,
        required_role=required_role,
        login_route=login_route,
        default_route=default_route,
    )
