from sqlalchemy import Column, String, Integer, ForeignKey, DateTime

from teamflow.db.base import Base

DEFAULT_PROJECT_COLOR = "#2563EB"


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    color = Column(String, default=DEFAULT_PROJECT_COLOR, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
