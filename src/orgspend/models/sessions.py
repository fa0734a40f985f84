"""Session drill-down models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from orgspend.models.entities import AgentType, Session


class UserInfo(BaseModel):
    name: str
    email: str
    department: str


class AgentInfo(BaseModel):
    name: str
    type: AgentType


class SessionContext(BaseModel):
    user_info: UserInfo
    agent_info: AgentInfo
    related_sessions: list[Session] = Field(default_factory=list)


class SessionDetails(BaseModel):
    """A session with the user, agent and nearby sessions around it."""

    session: Session
    context: SessionContext
