"""
Graphics sub-task model.

Tracks a design asset requested for a GRAPHICS task: what kind of asset,
which file formats are needed, and where the delivered output lives.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import JSONBType, enum_type


class GraphicsStatus(enum.Enum):
    """Design asset workflow status."""
    REQUESTED = "REQUESTED"
    DESIGNING = "DESIGNING"
    REVIEW = "REVIEW"
    APPROVED = "APPROVED"
    DELIVERED = "DELIVERED"


class GraphicsTask(Base, GuidMixin):
    """
    Graphics asset request attached one-to-one to a Task.

    Attributes:
        guid: GUID string property (gfx_xxx)
        task_id: Parent task (unique)
        owner_id: Responsible user
        asset_type: Asset kind (poster, story, banner, standee, reel, ...)
        formats: List of requested file formats
        status: Asset status (starts at REQUESTED)
        final_output_link: Link to the delivered asset
    """

    __tablename__ = "graphics_tasks"

    GUID_PREFIX = "gfx"

    id = Column(Integer, primary_key=True, autoincrement=True)

    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    asset_type = Column(String(50), nullable=False)
    formats = Column(JSONBType, nullable=False, default=list)
    status = Column(
        enum_type(GraphicsStatus),
        default=GraphicsStatus.REQUESTED,
        nullable=False,
    )
    final_output_link = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    task = relationship("Task", back_populates="graphics_task")
    owner = relationship("User")

    def __repr__(self) -> str:
        return (
            f"<GraphicsTask("
            f"id={self.id}, "
            f"asset_type='{self.asset_type}', "
            f"status={self.status.value if self.status else None}"
            f")>"
        )
