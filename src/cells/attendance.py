import logging

from sqlalchemy.exc import SQLAlchemyError

from src.db.database import CellAttendanceDB, CellMeetingDB
from src.errors import NotFoundError, RemoteFailure

logger = logging.getLogger(__name__)


def _get_meeting(db, meeting_id):
    meeting = db.query(CellMeetingDB).filter(CellMeetingDB.id == meeting_id).first()
    if not meeting:
        raise NotFoundError("Reunião não encontrada", f"No meeting with id {meeting_id}")
    return meeting


def meeting_attendance(db, meeting_id):
    """Return {member_id: present} for every attendance mark of a meeting."""
    meeting = _get_meeting(db, meeting_id)
    return {mark.member_id: mark.present for mark in meeting.attendance}


def set_attendance(db, meeting_id, member_id, present):
    """
    Mark a member as present or absent at a cell meeting.

    Updates the existing mark for the (meeting, member) pair or inserts one
    when there is none, so each member has at most one mark per meeting.

    Args:
        db: SQLAlchemy session
        meeting_id: Cell meeting
        member_id: Profile being marked
        present: Whether the member attended

    Returns:
        The attendance of the meeting after the change, as {member_id: present}
    """
    try:
        _get_meeting(db, meeting_id)
        existing = (
            db.query(CellAttendanceDB)
            .filter(CellAttendanceDB.meeting_id == meeting_id, CellAttendanceDB.member_id == member_id)
            .first()
        )
        if existing:
            existing.present = present
        else:
            db.add(CellAttendanceDB(meeting_id=meeting_id, member_id=member_id, present=present))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving attendance of {member_id} at meeting {meeting_id}: {e}")
        raise RemoteFailure("Falha ao realizar ação", str(e)) from e

    logger.info(f"Attendance of {member_id} at meeting {meeting_id} set to {present}")
    db.expire_all()
    return meeting_attendance(db, meeting_id)
