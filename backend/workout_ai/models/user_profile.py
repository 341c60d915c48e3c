"""Canonical fitness profile (onboarding output). Written elsewhere; read-only for plan generation."""

from __future__ import annotations

from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from workout_ai.db.base import Base


class UserProfileRecord(Base):
    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    fitness_level: Mapped[str] = mapped_column(String(16), nullable=False)  # beginner | intermediate | advanced
    fitness_goals: Mapped[list | None] = mapped_column(JSON, nullable=True)
    available_equipment: Mapped[list | None] = mapped_column(JSON, nullable=True)
    time_commitment: Mapped[dict] = mapped_column(JSON, nullable=False)
    preferences: Mapped[dict] = mapped_column(JSON, nullable=False)
    # weekly_minutes, intensity_score, training_load_index, profile_digest
    system: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped["User"] = relationship("User", back_populates="profile")

    def to_payload(self) -> dict:
        """Row as a plain dict in profile-schema shape (for pydantic validation)."""
        return {
            "fitness_level": self.fitness_level,
            "fitness_goals": self.fitness_goals or [],
            "available_equipment": self.available_equipment or [],
            "time_commitment": self.time_commitment,
            "preferences": self.preferences,
            "system": self.system,
        }
