"""Database table definitions for explanations and their version snapshots"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from mdreview.lifecycle.state import ExplanationStatus


class Explanation(SQLModel, table=True):
    """A markdown explanation: the document that AI suggestions are reviewed against"""
    __tablename__ = "explanations"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    content: str = Field(..., sa_column=Column(Text, nullable=False))
    status: ExplanationStatus = Field(default=ExplanationStatus.draft, nullable=False)
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class ExplanationVersion(SQLModel, table=True):
    """Immutable snapshot of an Explanation taken before it is overwritten."""
    __tablename__ = "explanation_versions"
    __table_args__ = (UniqueConstraint("explanation_id", "version_num", name="uq_expver_exp_num"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    explanation_id: UUID = Field(..., foreign_key="explanations.id", index=True, nullable=False)
    version_num: int = Field(..., nullable=False, description="Monotonically increasing per-explanation version number")
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    content: str = Field(..., sa_column=Column(Text, nullable=False))
    status: ExplanationStatus = Field(..., nullable=False)
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
