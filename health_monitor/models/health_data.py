"""Pydantic models for vitals readings, lifestyle profiles and assessments."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict


class LifestyleProfile(BaseModel):
    """Self-reported lifestyle attributes stored on the user document.

    Firestore keeps these under camelCase keys (the frontend writes them
    during onboarding); both spellings are accepted here.
    """

    model_config = ConfigDict(populate_by_name=True)

    bmi: Optional[float] = None
    smoking_habits: Optional[str] = Field(None, alias="smokingHabits")
    alcohol_use: Optional[str] = Field(None, alias="alcoholUse")
    stress_levels: Optional[str] = Field(None, alias="stressLevels")
    diet: Optional[str] = None
    physical_activity: Optional[str] = Field(None, alias="physicalActivity")

    @field_validator("bmi", mode="before")
    @classmethod
    def parse_bmi(cls, v):
        # The onboarding form stores bmi as a string; junk means "unknown"
        if v is None or isinstance(v, bool):
            return None
        try:
            return float(str(v).strip())
        except ValueError:
            return None

    @field_validator(
        "smoking_habits", "alcohol_use", "stress_levels", "diet", "physical_activity",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class VitalsIn(BaseModel):
    """Vitals as typed into the patient form."""

    bp: str = Field(..., description='Blood pressure, "systolic/diastolic" in mmHg')
    heart_rate: str = Field(..., description="Beats per minute")
    temperature: Optional[str] = Field(None, description="Celsius")
    notes: Optional[str] = None

    @field_validator("heart_rate", "temperature", mode="before")
    @classmethod
    def stringify(cls, v):
        # Validation of the numbers themselves belongs to analyze_vitals
        if v is None:
            return None
        return str(v)


class OnboardingIn(BaseModel):
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[str] = None
    ethnicity: Optional[str] = None
    bmi: Optional[float] = Field(None, gt=0)
    physical_activity: Optional[str] = None
    diet: Optional[str] = None
    alcohol_use: Optional[str] = None
    smoking_habits: Optional[str] = None
    stress_levels: Optional[str] = None


class VitalsAlertOut(BaseModel):
    valid: bool
    severity: str
    message: str
    should_alert: bool


class RiskFactorOut(BaseModel):
    name: str
    detail: str


class RiskAssessment(BaseModel):
    """Derived view of one reading plus the patient's lifestyle profile."""

    metric_statuses: Dict[str, str]
    alert_severity: str
    alert_message: str = ""
    should_alert: bool = False
    recommendations: List[str] = Field(default_factory=list)
    overall_risk_tier: str
    risk_score: int = Field(0, ge=0)
