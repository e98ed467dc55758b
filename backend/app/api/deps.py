from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.deps import get_db
from app.repositories.entity_repo import EntityRepository, SqlAlchemyEntityRepo
from app.services.entity_service import EntityService


def get_entity_repo(db: Session = Depends(get_db)) -> EntityRepository:
    return SqlAlchemyEntityRepo(db)


def get_entity_service(repo: EntityRepository = Depends(get_entity_repo)) -> EntityService:
    return EntityService(repo)
