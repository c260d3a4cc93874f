"""Pydantic models for portal accounts stored in the `users` collection."""
from pydantic import BaseModel, EmailStr, Field
from typing import Literal

ROLES = ("patient", "doctor", "admin")

# Admins are only granted through the custom claim (see set_role.py)
SignupRole = Literal["patient", "doctor"]


class UserRegistration(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    role: SignupRole = "patient"
