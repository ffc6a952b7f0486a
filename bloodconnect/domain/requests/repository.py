"""Blood request repository - Database operations for requests"""

from typing import Optional, Sequence

from sqlalchemy.orm import Session, joinedload

from ...models import BloodRequest, RequestMatch


class RequestRepository:
    """Repository for blood request database operations"""

    @staticmethod
    def get_by_id(db: Session, request_id: int) -> Optional[BloodRequest]:
        return db.query(BloodRequest).filter(BloodRequest.id == request_id).first()

    @staticmethod
    def get_detail(db: Session, request_id: int) -> Optional[BloodRequest]:
        """Request with requester and matched donors loaded"""
        return (
            db.query(BloodRequest)
            .options(
                joinedload(BloodRequest.requester),
                joinedload(BloodRequest.matches).joinedload(RequestMatch.donor),
            )
            .filter(BloodRequest.id == request_id)
            .first()
        )

    @staticmethod
    def list_requests(
        db: Session,
        blood_type: Optional[str] = None,
        statuses: Sequence[str] = (),
        urgency: Optional[str] = None,
        location: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[BloodRequest]:
        query = db.query(BloodRequest).options(joinedload(BloodRequest.requester))

        if blood_type:
            query = query.filter(BloodRequest.patient_blood_type == blood_type)
        if statuses:
            query = query.filter(BloodRequest.status.in_(statuses))
        if urgency:
            query = query.filter(BloodRequest.urgency == urgency)
        if location:
            query = query.filter(BloodRequest.hospital_city.ilike(f"%{location}%"))

        query = query.order_by(BloodRequest.created_at.desc(), BloodRequest.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def list_for_requester(db: Session, user_id: int) -> list[BloodRequest]:
        return (
            db.query(BloodRequest)
            .filter(BloodRequest.requester_id == user_id)
            .order_by(BloodRequest.created_at.desc(), BloodRequest.id.desc())
            .all()
        )

    @staticmethod
    def create_request(db: Session, requester_id: int, **request_data) -> BloodRequest:
        request = BloodRequest(requester_id=requester_id, **request_data)
        db.add(request)
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def update_request(db: Session, request: BloodRequest, **updates) -> BloodRequest:
        for key, value in updates.items():
            if hasattr(request, key):
                setattr(request, key, value)
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def save(db: Session, request: BloodRequest) -> BloodRequest:
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def delete_request(db: Session, request: BloodRequest) -> None:
        db.delete(request)
        db.commit()
