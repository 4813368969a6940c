"""Project repository - Database operations for showcase projects"""

from typing import Optional

from sqlalchemy.orm import Query, Session, joinedload

from ...models import Project


class ProjectRepository:
    @staticmethod
    def _with_relations(query: Query) -> Query:
        return query.options(joinedload(Project.service), joinedload(Project.technician))

    @staticmethod
    def get_by_id(db: Session, project_id: int) -> Optional[Project]:
        return ProjectRepository._with_relations(db.query(Project)).filter(Project.id == project_id).first()

    @staticmethod
    def query_projects(
        db: Session,
        service_id: Optional[int] = None,
        status: Optional[str] = None,
        featured: Optional[bool] = None,
        is_public: Optional[bool] = None,
    ) -> Query:
        query = ProjectRepository._with_relations(db.query(Project))
        if service_id:
            query = query.filter(Project.service_id == service_id)
        if status:
            query = query.filter(Project.status == status)
        if featured is not None:
            query = query.filter(Project.featured == featured)
        if is_public is not None:
            query = query.filter(Project.is_public == is_public)
        return query.order_by(Project.created_at.desc(), Project.id.desc())

    @staticmethod
    def get_featured(db: Session, limit: int = 6) -> list[Project]:
        return (
            ProjectRepository._with_relations(db.query(Project))
            .filter(Project.is_public.is_(True), Project.featured.is_(True))
            .order_by(Project.created_at.desc(), Project.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def create(db: Session, **project_data) -> Project:
        project = Project(**project_data)
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def update(db: Session, project: Project, **updates) -> Project:
        for key, value in updates.items():
            if value is not None and hasattr(project, key):
                setattr(project, key, value)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def delete(db: Session, project: Project) -> None:
        for booking in project.bookings:
            booking.project_id = None
        db.delete(project)
        db.commit()
