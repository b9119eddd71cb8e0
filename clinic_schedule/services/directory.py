"""Doctor and lab nurse directory."""
from typing import List

from clinic_schedule.http_client import ApiClient
from clinic_schedule.models import StaffMember
from clinic_schedule.responses import decode_many


class DirectoryService:

    def __init__(self, client: ApiClient):
        self.client = client

    def get_doctors(self) -> List[StaffMember]:
        return decode_many(StaffMember, self.client.get("/doctors"))

    def get_nurses(self) -> List[StaffMember]:
        return decode_many(StaffMember, self.client.get("/nurses"))

    def get_staffs(self) -> List[StaffMember]:
        """Front-desk staff (user accounts that book for patients)."""
        return decode_many(StaffMember, self.client.get("/staffs"))
