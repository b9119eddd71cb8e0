"""Configuration for the clinic scheduling client.

All deployment settings are read from the environment (or a local .env file)
once at import time. Domain constants live here too so they can be adjusted
without touching code.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# API Configuration
API_BASE_URL = os.getenv("CLINIC_API_BASE_URL", "http://localhost:8000/api/v1")
API_TOKEN = os.getenv("CLINIC_API_TOKEN") or None
API_TIMEOUT = float(os.getenv("CLINIC_API_TIMEOUT", "30"))
# 0 = single attempt; callers opt in to retries
API_MAX_RETRIES = int(os.getenv("CLINIC_API_MAX_RETRIES", "0"))

# IANA zone name used for day windows; unset means the system local zone
TIMEZONE = os.getenv("CLINIC_TIMEZONE") or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

QUICK_CREATE_MAX_WORKERS = int(os.getenv("QUICK_CREATE_MAX_WORKERS", "8"))

MOCK_API_PORT = int(os.getenv("MOCK_API_PORT", "8000"))

GENERIC_ERROR_MESSAGE = "Đã xảy ra lỗi, vui lòng thử lại"

APPOINTMENT_STATUSES = ["pending", "confirmed", "in-progress", "cancelled", "completed"]
CANCELLED_STATUS = "cancelled"

DAY_LABELS = {
    0: "Chủ nhật",
    1: "Thứ hai",
    2: "Thứ ba",
    3: "Thứ tư",
    4: "Thứ năm",
    5: "Thứ sáu",
    6: "Thứ bảy",
}

DEFAULT_SHIFTS = [
    {"start": "08:00", "end": "12:00", "note": "Ca sáng"},
    {"start": "13:00", "end": "17:00", "note": "Ca chiều"},
]

# Template used when a shift is added to the quick-create form
NEW_SHIFT = {"start": "08:00", "end": "12:00", "note": ""}

# Mock backend slot generation
MOCK_SLOT_DURATION_MINUTES = 30
