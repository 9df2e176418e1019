"""Task ORM model and the task number sequence."""

from sqlalchemy import DDL, ForeignKey, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.infrastructure.persistence.database import Base
from taskboard.infrastructure.persistence.models.mixins import BaseModelMixin


class Task(BaseModelMixin, Base):
    """Task. Table: task.

    owner_name and the two counters are denormalized so the list can be
    filtered, sorted and paginated on indexed columns without joins.
    """

    __tablename__ = "task"

    number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default="public", server_default="public"
    )
    owner_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    owner_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    comment_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    file_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        Index("ix_task_status_number", "status", "number"),
        Index("ix_task_title_number", "title", "number"),
        Index("ix_task_owner_name_number", "owner_name", "number"),
        Index("ix_task_comment_count_number", "comment_count", "number"),
    )


class TaskSequence(Base):
    """Single-writer counter for task numbers. Table: task_sequence.

    Advanced with UPDATE ... RETURNING inside the creating transaction; the
    row lock serialises concurrent creators.
    """

    __tablename__ = "task_sequence"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False)


TASK_SEQUENCE_NAME = "task"

# create_all (tests, fresh databases) starts the counter at zero like the migration does.
event.listen(
    TaskSequence.__table__,
    "after_create",
    DDL(f"INSERT INTO task_sequence (name, value) VALUES ('{TASK_SEQUENCE_NAME}', 0)"),
)
