from sqlalchemy import delete

from models.models import Complaint, Enquiry


class EnquiryRepo:
    def __init__(self, db):
        self.db = db

    async def delete_by_property(self, property_id: int) -> int:
        result = await self.db.execute(
            delete(Enquiry).where(Enquiry.property_id == property_id)
        )
        return result.rowcount


class ComplaintRepo:
    def __init__(self, db):
        self.db = db

    async def delete_by_property(self, property_id: int) -> int:
        result = await self.db.execute(
            delete(Complaint).where(Complaint.property_id == property_id)
        )
        return result.rowcount
