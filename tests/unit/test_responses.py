"""Tests for response envelope decoding."""
import pytest

from clinic_schedule.errors import ApiError, ResponseShapeError
from clinic_schedule.models import StaffMember
from clinic_schedule.responses import decode_many, decode_one, unwrap_envelope


class TestUnwrapEnvelope:

    def test_bare_list(self):
        assert unwrap_envelope([1, 2]) == [1, 2]

    def test_data_envelope(self):
        assert unwrap_envelope({"status": True, "data": [1]}) == [1]

    def test_named_list_inside_envelope(self):
        payload = {"status": True, "data": {"appointments": [{"_id": "a"}], "total": 1}}
        assert unwrap_envelope(payload, list, key="appointments") == [{"_id": "a"}]

    def test_named_list_without_envelope(self):
        assert unwrap_envelope({"slots": []}, list, key="slots") == []

    def test_null_list_is_empty(self):
        assert unwrap_envelope({"status": True, "data": None}) == []

    def test_status_false_raises_backend_message(self):
        with pytest.raises(ApiError, match="Không có quyền"):
            unwrap_envelope({"status": False, "message": "Không có quyền"})

    def test_wrong_shape(self):
        with pytest.raises(ResponseShapeError):
            unwrap_envelope({"status": True, "data": {"unexpected": 1}})

    def test_dict_expected(self):
        assert unwrap_envelope({"data": {"_id": "x"}}, dict) == {"_id": "x"}


class TestDecode:

    def test_decode_many(self):
        staff = decode_many(StaffMember, {"data": [{"_id": "doc-1", "fullName": "BS. An"}]})
        assert staff[0].id == "doc-1"
        assert staff[0].full_name == "BS. An"

    def test_invalid_record(self):
        with pytest.raises(ResponseShapeError):
            decode_many(StaffMember, [{"fullName": "no id"}])

    def test_decode_one_rejects_list(self):
        with pytest.raises(ResponseShapeError):
            decode_one(StaffMember, [{"_id": "doc-1"}])
