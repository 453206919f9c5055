import uuid

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class User(Base):
    """Owned by the identity layer; read here for usernames and foreign keys."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), unique=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        # Natural key used for fixture dedup.
        UniqueConstraint("home_team", "away_team", "date", name="uq_matches_natural_key"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    home_team: Mapped[str] = mapped_column(String(100))
    away_team: Mapped[str] = mapped_column(String(100))
    date: Mapped[str] = mapped_column(String(40), index=True)
    league: Mapped[str] = mapped_column(String(100))
    season: Mapped[str] = mapped_column(String(20))
    match_day: Mapped[int] = mapped_column(default=0, index=True)
    # "home:away"; "" or "0:0" until the match has been played
    result: Mapped[str] = mapped_column(String(20), default="")

    predictions: Mapped[list["Prediction"]] = relationship(
        back_populates="match", cascade="all, delete-orphan", passive_deletes=True
    )


class Prediction(Base):
    __tablename__ = "predictions"
    __table_args__ = (
        UniqueConstraint("user_id", "match_id", name="uq_predictions_user_match"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    match_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("matches.id", ondelete="CASCADE"), index=True)
    predicted_score_home: Mapped[int]
    predicted_score_away: Mapped[int]
    points: Mapped[int] = mapped_column(default=0)

    user: Mapped["User"] = relationship()
    match: Mapped["Match"] = relationship(back_populates="predictions")
