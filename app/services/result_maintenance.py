"""
Out-of-band repair for double-submitted quiz results.

Keeps the most recent result of every (user_id, quiz_id) pair and removes
the older ones. Not used by any request path.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.result import Result

logger = logging.getLogger(__name__)


@dataclass
class DuplicateGroup:
    user_id: int
    quiz_id: int
    duplicate_count: int
    kept_result_id: int
    deleted_count: int


class ResultMaintenanceService:
    def __init__(self, db: Session):
        self.db = db

    def find_duplicate_pairs(self):
        return (
            self.db.query(
                Result.user_id,
                Result.quiz_id,
                func.count(Result.id).label("duplicate_count"),
            )
            .group_by(Result.user_id, Result.quiz_id)
            .having(func.count(Result.id) > 1)
            .order_by(Result.user_id, Result.quiz_id)
            .all()
        )

    def deduplicate(self, dry_run: bool = False) -> List[DuplicateGroup]:
        groups = []
        try:
            for user_id, quiz_id, duplicate_count in self.find_duplicate_pairs():
                keep = (
                    self.db.query(Result.id)
                    .filter(Result.user_id == user_id, Result.quiz_id == quiz_id)
                    .order_by(Result.created_at.desc(), Result.id.desc())
                    .first()
                )
                stale = self.db.query(Result).filter(
                    Result.user_id == user_id,
                    Result.quiz_id == quiz_id,
                    Result.id != keep.id,
                )
                deleted = (
                    stale.count()
                    if dry_run
                    else stale.delete(synchronize_session=False)
                )
                groups.append(
                    DuplicateGroup(
                        user_id=user_id,
                        quiz_id=quiz_id,
                        duplicate_count=int(duplicate_count),
                        kept_result_id=keep.id,
                        deleted_count=deleted,
                    )
                )

            if dry_run:
                self.db.rollback()
            else:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Deduplicated {len(groups)} user/quiz pairs "
            f"({sum(g.deleted_count for g in groups)} results removed, dry_run={dry_run})"
        )
        return groups
