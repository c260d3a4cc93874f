"""Pydantic models for appointment booking."""
from datetime import datetime

from pydantic import BaseModel, Field


class AppointmentIn(BaseModel):
    doctor_name: str = Field("", description="Name of the doctor as shown in the doctor list")
    appointment_date: datetime
