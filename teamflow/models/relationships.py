from sqlalchemy.orm import relationship

from teamflow.models.user import User
from teamflow.models.team import Team, TeamMember
from teamflow.models.project import Project
from teamflow.models.task import Task, Comment
from teamflow.models.file import File
from teamflow.models.message import Message

# User
User.team_memberships = relationship("TeamMember", back_populates="user")
User.tasks_assigned = relationship("Task", back_populates="assignee", foreign_keys="Task.assignee_id")
User.comments = relationship("Comment", back_populates="user")
User.messages = relationship("Message", back_populates="user")
User.uploaded_files = relationship("File", back_populates="uploader", foreign_keys="File.uploaded_by")

# TeamMember
TeamMember.team = relationship("Team", back_populates="members")
TeamMember.user = relationship("User", back_populates="team_memberships")

# Team
Team.creator = relationship("User", foreign_keys=[Team.created_by])
Team.members = relationship("TeamMember", back_populates="team")
Team.projects = relationship("Project", back_populates="team")
Team.messages = relationship("Message", back_populates="team")

# Project
Project.team = relationship("Team", back_populates="projects")
Project.tasks = relationship("Task", back_populates="project")
Project.files = relationship("File", back_populates="project")

# Task
Task.assignee = relationship("User", back_populates="tasks_assigned", foreign_keys=[Task.assignee_id])
Task.project = relationship("Project", back_populates="tasks")
Task.comments = relationship("Comment", back_populates="task")
Task.files = relationship("File", back_populates="task")

# Comment
Comment.task = relationship("Task", back_populates="comments")
Comment.user = relationship("User", back_populates="comments")

# File
File.project = relationship("Project", back_populates="files")
File.task = relationship("Task", back_populates="files")
File.uploader = relationship("User", back_populates="uploaded_files", foreign_keys=[File.uploaded_by])

# Message
Message.team = relationship("Team", back_populates="messages")
Message.user = relationship("User", back_populates="messages")
