"""Vitals risk assessment and recommendations.

Every screen that colours a reading (patient vitals page, doctor
dashboard, admin patient details) goes through these functions so the
thresholds live in one place. Everything here is pure: no Firestore, no
clock, no shared state.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from health_monitor.models.health_data import LifestyleProfile, RiskAssessment


class Status(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    INVALID = "Invalid"
    NOT_AVAILABLE = "N/A"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class RiskTier(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}

# Thresholds (strict comparisons everywhere: 140/90 is still Normal)
SYSTOLIC_HIGH = 140
DIASTOLIC_HIGH = 90
SYSTOLIC_LOW = 90
DIASTOLIC_LOW = 60

HR_HIGH = 100
HR_LOW = 60
HR_BRADYCARDIA = 50

TEMP_FEVER = 38.0
TEMP_HYPOTHERMIA = 35.5

BMI_OBESE = 30
BMI_OVERWEIGHT = 25
BMI_UNDERWEIGHT = 18.5

TIER_HIGH_SCORE = 8
TIER_MODERATE_SCORE = 5

INVALID_INPUT_MESSAGE = "Invalid input. Please enter valid numerical values."

# Free-text answers -> canonical buckets. Onboarding and the admin
# screens never agreed on labels, so every known spelling is listed.
_SMOKING = {
    "current smoker": "current",
    "former smoker": "former",
    "non-smoker": "none",
    "non smoker": "none",
}
_ALCOHOL = {
    "regular": "heavy",
    "regular drinker": "heavy",
    "heavy": "heavy",
    "heavy drinker": "heavy",
    "occasional": "social",
    "occasional drinker": "social",
    "social": "social",
    "social drinker": "social",
    "none": "none",
    "non-drinker": "none",
}
_STRESS = {"high": "high", "medium": "moderate", "moderate": "moderate", "low": "low"}
_DIET = {"poor": "poor", "average": "moderate", "moderate": "moderate", "good": "good"}
_ACTIVITY = {
    "sedentary": "sedentary",
    "lightly active": "light",
    "light activity": "light",
    "light": "light",
    "moderately active": "active",
    "moderate": "active",
    "very active": "active",
    "active": "active",
}


@dataclass(frozen=True)
class VitalsAlert:
    valid: bool
    severity: Severity
    message: str
    should_alert: bool


@dataclass(frozen=True)
class RiskTierResult:
    tier: RiskTier
    score: int


@dataclass(frozen=True)
class RiskFactor:
    name: str
    detail: str


ProfileLike = Union[LifestyleProfile, Mapping[str, Any], None]


# -------------------------
# Parsing helpers
# -------------------------
def _is_blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


def parse_number(v: Any) -> Optional[float]:
    """Best-effort conversion to a finite float, None when impossible."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        value = float(v)
    else:
        try:
            value = float(str(v).strip())
        except ValueError:
            return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_blood_pressure(bp: Any) -> Optional[Tuple[int, int]]:
    """Split "120/80" into (120, 80); None for anything malformed."""
    if not isinstance(bp, str):
        return None
    parts = bp.split("/")
    if len(parts) != 2:
        return None
    tokens = [p.strip() for p in parts]
    # int() alone would also take "1_20", "+120" and non-ASCII digits
    if not all(t.isascii() and t.isdigit() for t in tokens):
        return None
    systolic, diastolic = int(tokens[0]), int(tokens[1])
    if systolic <= 0 or diastolic <= 0:
        return None
    return systolic, diastolic


def _coerce_profile(profile: ProfileLike) -> Optional[LifestyleProfile]:
    if profile is None:
        return None
    if isinstance(profile, LifestyleProfile):
        return profile
    return LifestyleProfile.model_validate(dict(profile))


def _canonical(value: Optional[str], table: Dict[str, str]) -> Optional[str]:
    if not value:
        return None
    return table.get(value.strip().lower())


def _escalate(current: Severity, new: Severity) -> Severity:
    return new if _SEVERITY_RANK[new] > _SEVERITY_RANK[current] else current


# -------------------------
# Classification
# -------------------------
def _bp_status(systolic: int, diastolic: int) -> Status:
    if systolic > SYSTOLIC_HIGH or diastolic > DIASTOLIC_HIGH:
        return Status.HIGH
    if systolic < SYSTOLIC_LOW or diastolic < DIASTOLIC_LOW:
        return Status.LOW
    return Status.NORMAL


def classify_blood_pressure(bp: Any) -> Status:
    pressure = parse_blood_pressure(bp)
    if pressure is None:
        return Status.INVALID
    return _bp_status(*pressure)


def classify_heart_rate(hr: Any) -> Status:
    value = parse_number(hr)
    if value is None:
        return Status.INVALID
    if value > HR_HIGH:
        return Status.HIGH
    if value < HR_LOW:
        return Status.LOW
    return Status.NORMAL


def classify_temperature(temperature: Any) -> Status:
    if _is_blank(temperature):
        return Status.NOT_AVAILABLE
    value = parse_number(temperature)
    if value is None:
        return Status.INVALID
    if value > TEMP_FEVER:
        return Status.HIGH
    if value < TEMP_HYPOTHERMIA:
        return Status.LOW
    return Status.NORMAL


# -------------------------
# Immediate feedback on submission
# -------------------------
def analyze_vitals(bp: Any, heart_rate: Any, temperature: Any = None) -> VitalsAlert:
    """
    Validate a reading and build the alert shown right after submission.

    valid=False means the reading must not be stored. Fragments are
    appended blood pressure -> heart rate -> temperature and the severity
    only ever goes up. should_alert drives the device vibration/notification.
    """
    pressure = parse_blood_pressure(bp)
    hr = parse_number(heart_rate)
    temp_given = not _is_blank(temperature)
    temp = parse_number(temperature) if temp_given else None

    if pressure is None or hr is None or hr <= 0 or (temp_given and temp is None):
        return VitalsAlert(
            valid=False,
            severity=Severity.ERROR,
            message=INVALID_INPUT_MESSAGE,
            should_alert=False,
        )

    fragments: List[str] = []
    severity = Severity.INFO
    should_alert = False

    bp_status = _bp_status(*pressure)
    if bp_status is Status.LOW:
        fragments.append("Low blood pressure detected. Stay hydrated.")
        severity = _escalate(severity, Severity.WARNING)
    elif bp_status is Status.HIGH:
        fragments.append("High blood pressure detected. Reduce salt intake.")
        severity = _escalate(severity, Severity.WARNING)
        should_alert = True

    if hr < HR_BRADYCARDIA:
        fragments.append("Bradycardia detected. Consult a doctor if you feel dizzy.")
        severity = _escalate(severity, Severity.ERROR)
        should_alert = True
    elif hr > HR_HIGH:
        fragments.append("Tachycardia detected. Rest and monitor your heart rate.")
        severity = _escalate(severity, Severity.WARNING)

    if temp is not None:
        if temp < TEMP_HYPOTHERMIA:
            fragments.append("Hypothermia risk detected. Warm up and seek medical attention.")
            severity = _escalate(severity, Severity.ERROR)
            should_alert = True
        elif temp > TEMP_FEVER:
            fragments.append("Fever detected. Rest and monitor your temperature.")
            severity = _escalate(severity, Severity.WARNING)

    return VitalsAlert(
        valid=True,
        severity=severity,
        message=" ".join(fragments),
        should_alert=should_alert,
    )


# -------------------------
# Recommendations
# -------------------------
def generate_recommendations(bp: Any, heart_rate: Any, profile: ProfileLike = None) -> List[str]:
    """
    Ordered advice for one reading.

    One blood pressure sentence and one heart rate sentence always come
    first. With high BP the smoking/alcohol/BMI/stress sentences follow,
    then the general lifestyle advice. The general BMI sentence is
    independent of the BP-linked one, so a BMI of 32 yields both.
    """
    recs: List[str] = []
    lifestyle = _coerce_profile(profile)
    bp_status = classify_blood_pressure(bp)

    if bp_status is Status.HIGH:
        recs.append("Your blood pressure is high.")
    elif bp_status is Status.LOW:
        recs.append("Your blood pressure is low. Ensure you are staying well-hydrated.")
    else:
        recs.append("Your blood pressure is within a normal range.")

    hr_status = classify_heart_rate(heart_rate)
    if hr_status is Status.HIGH:
        recs.append("Your heart rate is elevated. Please consider resting and monitoring your heart rate.")
    elif hr_status is Status.LOW:
        recs.append("Your heart rate is slightly low. If you experience dizziness, consult a doctor.")
    else:
        recs.append("Your heart rate is normal. Great job!")

    if lifestyle is None:
        return recs

    if bp_status is Status.HIGH:
        if _canonical(lifestyle.smoking_habits, _SMOKING) == "current":
            recs.append(
                "Since you are a current smoker, quitting smoking can help lower your blood pressure."
            )
        if _canonical(lifestyle.alcohol_use, _ALCOHOL) == "heavy":
            recs.append(
                "Regular alcohol consumption might be contributing to your high blood pressure. "
                "Consider reducing your intake."
            )
        if lifestyle.bmi and lifestyle.bmi > BMI_OBESE:
            recs.append(
                "A high BMI coupled with high blood pressure increases your cardiovascular risk. "
                "Consider weight management strategies."
            )
        if _canonical(lifestyle.stress_levels, _STRESS) == "high":
            recs.append(
                "High stress levels may be affecting your blood pressure. "
                "Consider stress-reduction techniques like mindfulness or therapy."
            )

    if lifestyle.bmi:
        if lifestyle.bmi > BMI_OVERWEIGHT:
            recs.append(
                "Your BMI is high. Consider adopting a healthier diet and increasing your physical activity."
            )
        elif lifestyle.bmi < BMI_UNDERWEIGHT:
            recs.append(
                "Your BMI is low. Consider consulting a nutritionist to ensure you're getting enough nutrients."
            )
    if _canonical(lifestyle.physical_activity, _ACTIVITY) == "sedentary":
        recs.append("Increasing your physical activity could greatly benefit your overall health.")
    if _canonical(lifestyle.diet, _DIET) == "poor":
        recs.append(
            "Improving your diet by incorporating more fruits and vegetables can improve your health."
        )

    return recs


# -------------------------
# Lifestyle risk
# -------------------------
_SMOKING_POINTS = {"current": 3, "former": 1}
_ALCOHOL_POINTS = {"heavy": 3, "social": 1}
_STRESS_POINTS = {"high": 2, "moderate": 1}
_DIET_POINTS = {"poor": 2, "moderate": 1}
_ACTIVITY_POINTS = {"sedentary": 2, "light": 1}


def compute_risk_score(profile: ProfileLike) -> int:
    lifestyle = _coerce_profile(profile) or LifestyleProfile()
    score = 0

    if lifestyle.bmi is not None:
        if lifestyle.bmi > BMI_OBESE:
            score += 3
        elif lifestyle.bmi > BMI_OVERWEIGHT:
            score += 2

    score += _SMOKING_POINTS.get(_canonical(lifestyle.smoking_habits, _SMOKING), 0)
    score += _ALCOHOL_POINTS.get(_canonical(lifestyle.alcohol_use, _ALCOHOL), 0)
    score += _STRESS_POINTS.get(_canonical(lifestyle.stress_levels, _STRESS), 0)
    score += _DIET_POINTS.get(_canonical(lifestyle.diet, _DIET), 0)
    score += _ACTIVITY_POINTS.get(_canonical(lifestyle.physical_activity, _ACTIVITY), 0)
    return score


def _tier_for(score: int) -> RiskTier:
    if score >= TIER_HIGH_SCORE:
        return RiskTier.HIGH
    if score >= TIER_MODERATE_SCORE:
        return RiskTier.MODERATE
    return RiskTier.LOW


def compute_overall_risk_tier(profile: ProfileLike) -> RiskTierResult:
    score = compute_risk_score(profile)
    return RiskTierResult(tier=_tier_for(score), score=score)


def identify_risk_factors(profile: ProfileLike) -> List[RiskFactor]:
    """High-risk lifestyle factors, in the order the patient details panel lists them."""
    lifestyle = _coerce_profile(profile)
    if lifestyle is None:
        return []

    factors: List[RiskFactor] = []
    if _canonical(lifestyle.smoking_habits, _SMOKING) == "current":
        factors.append(RiskFactor(
            "Smoking",
            "Current smoker status increases risk for cardiovascular and respiratory issues",
        ))
    if _canonical(lifestyle.diet, _DIET) == "poor":
        factors.append(RiskFactor(
            "Dietary Habits",
            "Poor diet may lead to nutritional deficiencies and increased risk of chronic diseases",
        ))
    if _canonical(lifestyle.physical_activity, _ACTIVITY) == "sedentary":
        factors.append(RiskFactor(
            "Physical Activity",
            "Sedentary lifestyle increases risk for cardiovascular disease and metabolic disorders",
        ))
    if lifestyle.bmi is not None and lifestyle.bmi > BMI_OBESE:
        factors.append(RiskFactor(
            "BMI",
            f"BMI of {lifestyle.bmi:g} indicates obesity, increasing risk for multiple conditions",
        ))
    return factors


def assess_reading(
    bp: Any,
    heart_rate: Any,
    temperature: Any = None,
    profile: ProfileLike = None,
) -> RiskAssessment:
    alert = analyze_vitals(bp, heart_rate, temperature)
    tier = compute_overall_risk_tier(profile)

    return RiskAssessment(
        metric_statuses={
            "blood_pressure": classify_blood_pressure(bp).value,
            "heart_rate": classify_heart_rate(heart_rate).value,
            "temperature": classify_temperature(temperature).value,
        },
        alert_severity=alert.severity.value,
        alert_message=alert.message,
        should_alert=alert.should_alert,
        recommendations=generate_recommendations(bp, heart_rate, profile) if alert.valid else [],
        overall_risk_tier=tier.tier.value,
        risk_score=tier.score,
    )
