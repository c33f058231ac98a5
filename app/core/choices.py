"""Shared value sets for examinee profile fields.

Applicant and registrant forms used to carry their own copies of these lists
with different spellings. Both now validate against the enums below, and the
normalisers reject anything they do not know instead of guessing.
"""

import enum
from typing import Dict, Optional


class Sex(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class CivilStatus(str, enum.Enum):
    SINGLE = "Single"
    MARRIED = "Married"
    SEPARATED = "Separated"
    DIVORCED = "Divorced"
    ANNULLED = "Annulled"
    WIDOWED = "Widow/er"
    COMMON_LAW = "Common Law/Live-in"


class EducationalAttainment(str, enum.Enum):
    NO_GRADE_COMPLETED = "No Grade Completed"
    ELEMENTARY_UNDERGRADUATE = "Elementary Undergraduate"
    ELEMENTARY_GRADUATE = "Elementary Graduate"
    HIGH_SCHOOL_UNDERGRADUATE = "High School Undergraduate"
    HIGH_SCHOOL_GRADUATE = "High School Graduate"
    JUNIOR_HIGH = "Junior High (K-12)"
    SENIOR_HIGH = "Senior High (K-12)"
    TVET_UNDERGRADUATE = "Post-Secondary Non-Tertiary/Technical Vocational Undergraduate"
    TVET_GRADUATE = "Post-Secondary Non-Tertiary/Technical Vocational Graduate"
    COLLEGE_UNDERGRADUATE = "College Undergraduate"
    COLLEGE_GRADUATE = "College Graduate"
    MASTERAL = "Masteral"
    DOCTORATE = "Doctorate"


class TestSessionStatus(str, enum.Enum):
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


# Legacy spellings still submitted by older forms.
CIVIL_STATUS_ALIASES: Dict[str, CivilStatus] = {
    "widow": CivilStatus.WIDOWED,
    "widower": CivilStatus.WIDOWED,
    "widowed": CivilStatus.WIDOWED,
    "live-in": CivilStatus.COMMON_LAW,
    "common law": CivilStatus.COMMON_LAW,
}

EDUCATION_ALIASES: Dict[str, EducationalAttainment] = {
    "high school": EducationalAttainment.HIGH_SCHOOL_GRADUATE,
    "tvet graduate": EducationalAttainment.TVET_GRADUATE,
    "college level": EducationalAttainment.COLLEGE_UNDERGRADUATE,
}


def _normalize(value, enum_cls, aliases):
    if value is None or isinstance(value, enum_cls):
        return value
    raw = str(value).strip()
    for member in enum_cls:
        if member.value.lower() == raw.lower():
            return member
    alias = aliases.get(raw.lower())
    if alias is None:
        raise ValueError(f"Unknown {enum_cls.__name__} value: {raw!r}")
    return alias


def normalize_civil_status(value: Optional[str]) -> Optional[CivilStatus]:
    return _normalize(value, CivilStatus, CIVIL_STATUS_ALIASES)


def normalize_educational_attainment(value: Optional[str]) -> Optional[EducationalAttainment]:
    return _normalize(value, EducationalAttainment, EDUCATION_ALIASES)
