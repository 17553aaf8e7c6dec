from datetime import date
from sqlalchemy import Column, Integer, Boolean, Date, Text, ForeignKey, JSON
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import ReportType

DEVELOPMENT_AREAS = ("cognitive", "physical", "social", "emotional", "language")


class ProgressReport(TimestampMixin, Base):
    __tablename__ = "progress_reports"

    child_id = Column(Integer, ForeignKey("children.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    report_date = Column(Date, nullable=False, default=date.today, index=True)
    report_type = Column(enum_column(ReportType), nullable=False)

    # {area: {"rating": 1-5, "notes": str}} for each of DEVELOPMENT_AREAS
    development_areas = Column(JSON, default=dict, nullable=False)
    skills = Column(JSON, default=list, nullable=False)
    behavior = Column(JSON, default=dict, nullable=False)
    goals = Column(JSON, default=list, nullable=False)
    recommendations = Column(JSON, default=list, nullable=False)

    overall_rating = Column(Integer, nullable=False)
    summary = Column(Text, nullable=False)
    shared_with_parents = Column(Boolean, default=False, nullable=False, index=True)
    parent_feedback = Column(Text, nullable=True)

    @property
    def overall_development_score(self):
        """Mean of the rated development areas, one decimal"""
        areas = self.development_areas or {}
        ratings = [
            areas[name]["rating"]
            for name in DEVELOPMENT_AREAS
            if isinstance(areas.get(name), dict) and areas[name].get("rating") is not None
        ]
        if not ratings:
            return None
        return round(sum(ratings) / len(ratings), 1)

    def __repr__(self):
        return f"<ProgressReport(id={self.id}, child={self.child_id}, date={self.report_date})>"
