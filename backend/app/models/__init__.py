from app.models.app_config import AppConfig
from app.models.assignments import Assignment
from app.models.capacity import Capacity
from app.models.catalog import Domain, Status
from app.models.projects import Project, ProjectSkillBreakdown
from app.models.resources import Resource, ResourceSkill

__all__ = [
    "AppConfig",
    "Assignment",
    "Capacity",
    "Domain",
    "Status",
    "Project",
    "ProjectSkillBreakdown",
    "Resource",
    "ResourceSkill",
]
