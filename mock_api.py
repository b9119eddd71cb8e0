"""Mock clinic backend for local development.

Flask server with in-memory data for the endpoints the scheduling client
uses:
- Doctor / nurse / staff directory
- Work schedules (CRUD + available staff)
- Appointments (list, slots per doctor or across doctors, available dates,
  specialties, booking by doctor or auto-assigned, suggested slots, status
  changes)

Like the real backend, most routes wrap payloads in {"status": true, "data": ...}
while a few answer with the bare payload.

Run with: python mock_api.py
"""
import re
import threading
import uuid
from datetime import date, datetime, timedelta

from flask import Flask, jsonify, request
from flask_cors import CORS

from clinic_schedule import config

app = Flask(__name__)
CORS(app)
app.config["REQUIRE_AUTH"] = False
# Number of work schedule creations to accept before answering 500 (None = never fail)
app.config["FAIL_CREATES_AFTER"] = None

API_PREFIX = "/api/v1"
HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

_lock = threading.Lock()
doctors = []
nurses = []
staffs = []
work_schedules = []
appointments = []
_create_count = 0


def new_id() -> str:
    return uuid.uuid4().hex[:24]


def reset_store():
    """Restore the seed data (used between tests)."""
    global _create_count
    with _lock:
        doctors[:] = [
            {"_id": "doc-001", "fullName": "BS. Nguyễn Văn An", "specialty": "Nội khoa"},
            {"_id": "doc-002", "fullName": "BS. Trần Thị Bình", "specialty": "Nhi khoa"},
        ]
        nurses[:] = [
            {"_id": "nurse-001", "fullName": "Lê Thị Cúc"},
        ]
        staffs[:] = [
            {"_id": "staff-001", "userId": "user-101", "fullName": "Phạm Minh Đức", "phone": "0901234567"},
        ]
        work_schedules.clear()
        appointments.clear()
        _create_count = 0


reset_store()


def ok(data, status=200):
    return jsonify({"status": True, "data": data}), status


def fail(message, status=400):
    return jsonify({"status": False, "message": message}), status


@app.before_request
def check_auth():
    if request.method == "OPTIONS" or not app.config["REQUIRE_AUTH"]:
        return None
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer ") or not header[7:].strip():
        return fail("Unauthorized", 401)
    return None


def js_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def parse_day(value):
    try:
        return datetime.strptime(value or "", "%Y-%m-%d").date()
    except ValueError:
        return None


def owner_of(schedule):
    if schedule.get("doctorId"):
        return "doctor", schedule["doctorId"]
    return "nurse", schedule["labNurseId"]


def validate_schedule(data):
    """Return an error message for an invalid schedule body, else None."""
    if bool(data.get("doctorId")) == bool(data.get("labNurseId")):
        return "Exactly one of doctorId or labNurseId is required"
    day = data.get("dayOfWeek")
    if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
        return "dayOfWeek must be an integer between 0 and 6"
    start, end = data.get("shiftStart"), data.get("shiftEnd")
    if not (isinstance(start, str) and HHMM.match(start) and isinstance(end, str) and HHMM.match(end)):
        return "shiftStart and shiftEnd must be HH:MM"
    if not start < end:
        return "shiftStart must be before shiftEnd"
    return None


def find(collection, item_id):
    return next((item for item in collection if item["_id"] == item_id), None)


def booked_times(doctor_id, day):
    prefix = day.isoformat()
    return {
        apt["appointmentDate"][:16]
        for apt in appointments
        if apt["doctorId"] == doctor_id
        and apt["status"] != config.CANCELLED_STATUS
        and apt["appointmentDate"].startswith(prefix)
    }


def generate_slots(doctor_id, day):
    """Half-hour slots inside the doctor's shifts for the weekday, minus booked ones."""
    taken = booked_times(doctor_id, day)
    step = timedelta(minutes=config.MOCK_SLOT_DURATION_MINUTES)
    slots = []
    for schedule in work_schedules:
        if schedule.get("doctorId") != doctor_id or schedule["dayOfWeek"] != js_weekday(day):
            continue
        current = datetime.combine(day, datetime.strptime(schedule["shiftStart"], "%H:%M").time())
        end = datetime.combine(day, datetime.strptime(schedule["shiftEnd"], "%H:%M").time())
        while current + step <= end:
            stamp = current.strftime("%Y-%m-%dT%H:%M")
            if stamp not in taken:
                slots.append({"time": current.isoformat(), "doctorId": doctor_id})
            current += step
    slots.sort(key=lambda slot: slot["time"])
    return slots


# ============= Directory =============

@app.route(f"{API_PREFIX}/doctors", methods=["GET"])
def list_doctors():
    return ok(doctors)


@app.route(f"{API_PREFIX}/nurses", methods=["GET"])
def list_nurses():
    return ok(nurses)


@app.route(f"{API_PREFIX}/staffs", methods=["GET"])
def list_staffs():
    return ok(staffs)


# ============= Work schedules =============

@app.route(f"{API_PREFIX}/work-schedules", methods=["POST"])
def create_work_schedule():
    """POST /work-schedules - Create one schedule."""
    global _create_count
    data = request.get_json(silent=True) or {}
    error = validate_schedule(data)
    if error:
        return fail(error)

    with _lock:
        limit = app.config["FAIL_CREATES_AFTER"]
        if limit is not None and _create_count >= limit:
            return fail("Internal server error", 500)
        _create_count += 1

        schedule = {
            "_id": new_id(),
            "dayOfWeek": data["dayOfWeek"],
            "shiftStart": data["shiftStart"],
            "shiftEnd": data["shiftEnd"],
            "note": data.get("note") or "",
            "createdAt": datetime.now().isoformat(),
        }
        if data.get("doctorId"):
            schedule["doctorId"] = data["doctorId"]
        else:
            schedule["labNurseId"] = data["labNurseId"]
        work_schedules.append(schedule)
    return ok(schedule, 201)


@app.route(f"{API_PREFIX}/work-schedules/doctor/<doctor_id>", methods=["GET"])
def doctor_schedules(doctor_id):
    return ok([s for s in work_schedules if s.get("doctorId") == doctor_id])


@app.route(f"{API_PREFIX}/work-schedules/nurse/<nurse_id>", methods=["GET"])
def nurse_schedules(nurse_id):
    # Bare list, as the real backend does on this route
    return jsonify([s for s in work_schedules if s.get("labNurseId") == nurse_id])


@app.route(f"{API_PREFIX}/work-schedules/available", methods=["GET"])
def available_staff():
    """GET /work-schedules/available?dayOfWeek&time&role - Staff on shift."""
    try:
        day = int(request.args.get("dayOfWeek", ""))
    except ValueError:
        return fail("dayOfWeek is required")
    time_of_day = request.args.get("time", "")
    role = request.args.get("role")
    if not HHMM.match(time_of_day) or role not in ("doctor", "nurse"):
        return fail("time (HH:MM) and role (doctor|nurse) are required")

    people = doctors if role == "doctor" else nurses
    on_shift = set()
    for schedule in work_schedules:
        kind, owner_id = owner_of(schedule)
        if kind == role and schedule["dayOfWeek"] == day \
                and schedule["shiftStart"] <= time_of_day < schedule["shiftEnd"]:
            on_shift.add(owner_id)
    return ok([person for person in people if person["_id"] in on_shift])


@app.route(f"{API_PREFIX}/work-schedules/<schedule_id>", methods=["PUT"])
def update_work_schedule(schedule_id):
    data = request.get_json(silent=True) or {}
    with _lock:
        schedule = find(work_schedules, schedule_id)
        if not schedule:
            return fail("Work schedule not found", 404)
        merged = dict(schedule)
        merged.update({k: v for k, v in data.items() if k in (
            "doctorId", "labNurseId", "dayOfWeek", "shiftStart", "shiftEnd", "note")})
        if data.get("doctorId"):
            merged.pop("labNurseId", None)
        elif data.get("labNurseId"):
            merged.pop("doctorId", None)
        error = validate_schedule(merged)
        if error:
            return fail(error)
        merged["updatedAt"] = datetime.now().isoformat()
        schedule.clear()
        schedule.update(merged)
    return ok(schedule)


@app.route(f"{API_PREFIX}/work-schedules/<schedule_id>", methods=["DELETE"])
def delete_work_schedule(schedule_id):
    with _lock:
        schedule = find(work_schedules, schedule_id)
        if not schedule:
            return fail("Work schedule not found", 404)
        work_schedules.remove(schedule)
    return jsonify({"status": True, "message": "Deleted"})


# ============= Appointments =============

@app.route(f"{API_PREFIX}/appointments", methods=["GET"])
def list_appointments():
    status = request.args.get("status")
    result = [
        {**apt, "doctorId": {"_id": apt["doctorId"], "fullName": find(doctors, apt["doctorId"])["fullName"]}}
        for apt in appointments
        if status is None or apt["status"] == status
    ]
    return ok(result)


@app.route(f"{API_PREFIX}/appointments/doctors/available-slots", methods=["GET"])
def available_slots():
    """GET /appointments/doctors/available-slots?doctorId&date - Free candidate slots."""
    doctor_id = request.args.get("doctorId")
    day = parse_day(request.args.get("date"))
    if not doctor_id or day is None:
        return fail("doctorId and date (YYYY-MM-DD) are required")
    # Bare list, as the real backend does on this route
    return jsonify(generate_slots(doctor_id, day))


@app.route(f"{API_PREFIX}/appointments/doctors/available-dates", methods=["GET"])
def available_dates():
    doctor_id = request.args.get("doctorId")
    if not doctor_id:
        return fail("doctorId is required")
    today = date.today()
    days = [today + timedelta(days=offset) for offset in range(14)]
    return ok([day.isoformat() for day in days if generate_slots(doctor_id, day)])


@app.route(f"{API_PREFIX}/appointments/slots", methods=["GET"])
def all_available_slots():
    """GET /appointments/slots?date[&doctorId][&specialty] - Free slots across doctors."""
    day = parse_day(request.args.get("date"))
    if day is None:
        return fail("date (YYYY-MM-DD) is required")
    slots = []
    for doctor in doctors_for(request.args.get("specialty"), request.args.get("doctorId")):
        slots.extend(generate_slots(doctor["_id"], day))
    slots.sort(key=lambda slot: (slot["time"], slot["doctorId"]))
    return ok(slots)


@app.route(f"{API_PREFIX}/appointments/specialties", methods=["GET"])
def list_specialties():
    return ok(sorted({doctor["specialty"] for doctor in doctors if doctor.get("specialty")}))


def doctors_for(specialty=None, doctor_id=None):
    return [
        doctor for doctor in doctors
        if (not specialty or doctor.get("specialty") == specialty)
        and (not doctor_id or doctor["_id"] == doctor_id)
    ]


def parse_moment(data):
    value = data.get("appointmentDate")
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def book(doctor_id, moment, data):
    """Store a pending appointment; the caller holds _lock and has checked the slot."""
    appointment = {
        "_id": new_id(),
        "doctorId": {"_id": doctor_id, "fullName": find(doctors, doctor_id)["fullName"]},
        "patientId": data.get("patientId") or "patient-001",
        "appointmentDate": moment.isoformat(),
        "status": "pending",
        "note": data.get("note") or "",
    }
    # Stored with a bare doctorId; listed embedded
    appointments.append({**appointment, "doctorId": doctor_id})
    return appointment


@app.route(f"{API_PREFIX}/appointments/doctors", methods=["POST"])
def create_doctor_appointment():
    """POST /appointments/doctors - Book a slot with a doctor."""
    data = request.get_json(silent=True) or {}
    doctor_id = data.get("doctorId")
    moment = parse_moment(data)
    if moment is None:
        return fail("appointmentDate must be an ISO timestamp")
    if not find(doctors, doctor_id):
        return fail("Doctor not found", 404)

    with _lock:
        stamp = moment.strftime("%Y-%m-%dT%H:%M")
        if stamp in booked_times(doctor_id, moment.date()):
            return fail("Slot already booked", 409)
        appointment = book(doctor_id, moment, data)
    return ok(appointment, 201)


@app.route(f"{API_PREFIX}/appointments/auto-assign", methods=["POST"])
def auto_assign_appointment():
    """POST /appointments/auto-assign - Book with the first doctor free at that time."""
    data = request.get_json(silent=True) or {}
    moment = parse_moment(data)
    if moment is None:
        return fail("appointmentDate must be an ISO timestamp")

    with _lock:
        stamp = moment.strftime("%Y-%m-%dT%H:%M")
        for doctor in doctors_for(data.get("specialty")):
            offered = {slot["time"][:16] for slot in generate_slots(doctor["_id"], moment.date())}
            if stamp in offered:
                return ok(book(doctor["_id"], moment, data), 201)
    return fail("No doctor is available at this time", 409)


@app.route(f"{API_PREFIX}/appointments/<appointment_id>/suggested-slots", methods=["GET"])
def suggested_slots(appointment_id):
    """GET /appointments/{id}/suggested-slots?limit - Free slots of the same doctor from that day on."""
    try:
        limit = int(request.args.get("limit", 5))
    except ValueError:
        return fail("limit must be an integer")
    appointment = find(appointments, appointment_id)
    if not appointment:
        return fail("Appointment not found", 404)

    start = datetime.fromisoformat(appointment["appointmentDate"]).date()
    suggestions = []
    for offset in range(14):
        suggestions.extend(generate_slots(appointment["doctorId"], start + timedelta(days=offset)))
        if len(suggestions) >= limit:
            break
    return ok(suggestions[:max(limit, 0)])


def _set_status(appointment_id, status, **extra):
    with _lock:
        appointment = find(appointments, appointment_id)
        if not appointment:
            return fail("Appointment not found", 404)
        if appointment["status"] == config.CANCELLED_STATUS:
            return fail("Appointment already cancelled")
        appointment["status"] = status
        appointment.update(extra)
    return ok(appointment)


@app.route(f"{API_PREFIX}/appointments/<appointment_id>/confirm", methods=["POST"])
def confirm_appointment(appointment_id):
    return _set_status(appointment_id, "confirmed")


@app.route(f"{API_PREFIX}/appointments/<appointment_id>/cancel", methods=["POST"])
def cancel_appointment(appointment_id):
    return _set_status(appointment_id, config.CANCELLED_STATUS)


@app.route(f"{API_PREFIX}/appointments/<appointment_id>/reject", methods=["POST"])
def reject_appointment(appointment_id):
    data = request.get_json(silent=True) or {}
    return _set_status(appointment_id, config.CANCELLED_STATUS, rejectReason=data.get("reason") or "")


@app.route(f"{API_PREFIX}/appointments/<appointment_id>", methods=["PUT"])
def update_appointment(appointment_id):
    data = request.get_json(silent=True) or {}
    with _lock:
        appointment = find(appointments, appointment_id)
        if not appointment:
            return fail("Appointment not found", 404)
        for field in ("appointmentDate", "note", "doctorId"):
            if field in data:
                appointment[field] = data[field]
    return ok(appointment)


@app.route(f"{API_PREFIX}/appointments/<appointment_id>", methods=["DELETE"])
def delete_appointment(appointment_id):
    with _lock:
        appointment = find(appointments, appointment_id)
        if not appointment:
            return fail("Appointment not found", 404)
        appointments.remove(appointment)
    return jsonify({"status": True, "message": "Deleted"})


if __name__ == "__main__":
    print(f"Mock clinic API on http://localhost:{config.MOCK_API_PORT}{API_PREFIX}")
    app.run(port=config.MOCK_API_PORT, debug=True)
