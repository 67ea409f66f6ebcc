"""People module: raw profile records to normalized Person objects.

Extracts the attribute sets the network builder consumes (companies,
schools, location, skills) and collects per-record processing errors
instead of aborting a batch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from schema import ValidationError, validate_profile
from util import collapse_whitespace, date_key, months_between


COMPANY_SUFFIXES = re.compile(r"\s+(inc|llc|corp|ltd|co)\.?$", re.IGNORECASE)
SCHOOL_SUFFIXES = re.compile(r"\s+(university|college|institute)$", re.IGNORECASE)
SKILL_OVERFLOW = re.compile(r"\s+and\s+\+\d+\s+skill.*$", re.IGNORECASE)


def normalize_company_name(name: Optional[str]) -> str:
    """Normalize a company name for grouping.

    Lowercases and strips one trailing legal suffix (Inc, LLC, Corp, Ltd,
    Co, with or without a period). Idempotent.
    """
    if not name:
        return ""
    value = collapse_whitespace(name).lower()
    previous = None
    while previous != value:
        previous = value
        value = COMPANY_SUFFIXES.sub("", value).strip()
    return value


def normalize_school_name(name: Optional[str]) -> str:
    """Normalize a school name: lowercase, drop University/College/Institute."""
    if not name:
        return ""
    value = collapse_whitespace(name).lower()
    previous = None
    while previous != value:
        previous = value
        value = SCHOOL_SUFFIXES.sub("", value).strip()
    return value


def clean_skill(skill: Optional[str]) -> str:
    """Remove the "and +N skills" marker some exports append."""
    if not skill:
        return ""
    return collapse_whitespace(SKILL_OVERFLOW.sub("", skill))


@dataclass
class Location:
    city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    full: Optional[str] = None


@dataclass
class CurrentCompany:
    name: Optional[str] = None
    urn: Optional[str] = None
    url: Optional[str] = None


@dataclass
class Position:
    title: Optional[str] = None
    duration: Optional[str] = None
    start_date: Optional[dict[str, Any]] = None
    end_date: Optional[dict[str, Any]] = None
    is_current: bool = False
    location: Optional[str] = None


@dataclass
class Company:
    """One employer, with every position held there merged."""

    name: str
    normalized_name: str
    positions: list[Position] = field(default_factory=list)
    total_duration: int = 0
    company_id: Optional[str] = None
    logo: Optional[str] = None
    linkedin_url: Optional[str] = None

    @property
    def latest_start(self) -> Optional[tuple[int, int]]:
        keys = [date_key(p.start_date) for p in self.positions]
        keys = [k for k in keys if k is not None]
        return max(keys) if keys else None

    @property
    def is_current(self) -> bool:
        return any(p.is_current for p in self.positions)


@dataclass
class Education:
    school: Optional[str]
    normalized_school: str
    degree: Optional[str] = None
    duration: Optional[str] = None
    start_date: Optional[dict[str, Any]] = None
    end_date: Optional[dict[str, Any]] = None
    activities: Optional[str] = None
    school_id: Optional[str] = None
    logo: Optional[str] = None
    linkedin_url: Optional[str] = None


@dataclass
class Person:
    """A normalized people profile.

    Only ``id`` is required; every attribute list defaults to empty so the
    network builder can treat missing data as "no groups".
    """

    id: str
    name: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    profile_url: Optional[str] = None
    profile_picture: Optional[str] = None
    about: Optional[str] = None
    location: Optional[Location] = None
    current_company: CurrentCompany = field(default_factory=CurrentCompany)
    companies: list[Company] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Person:
        """Build a Person from a raw profile record.

        Raises:
            ValidationError: If basic_info or public_identifier is missing
        """
        validate_profile(raw)
        info = raw["basic_info"]
        experience = raw.get("experience") or []

        name = info.get("fullname") or ""
        first_name = info.get("first_name")
        if not first_name and name:
            first_name = name.split(" ")[0]

        return cls(
            id=info["public_identifier"],
            name=name or info["public_identifier"],
            first_name=first_name,
            last_name=info.get("last_name"),
            headline=info.get("headline"),
            profile_url=raw.get("profileUrl"),
            profile_picture=info.get("profile_picture_url"),
            about=info.get("about"),
            location=extract_location(info.get("location")),
            current_company=CurrentCompany(
                name=info.get("current_company"),
                urn=info.get("current_company_urn"),
                url=info.get("current_company_url"),
            ),
            companies=extract_companies(experience),
            education=extract_education(raw.get("education") or []),
            skills=extract_skills(experience),
        )

    @property
    def display_label(self) -> str:
        """Short label for graph nodes (first name)."""
        if self.first_name:
            return self.first_name
        if self.name:
            return self.name.split(" ")[0]
        return self.id

    def company_names(self) -> list[str]:
        return [c.normalized_name for c in self.companies]

    def school_names(self) -> list[str]:
        return [e.normalized_school for e in self.education]

    def location_key(self) -> Optional[str]:
        """Return "city_country" lowercased, or None without a location."""
        if not self.location:
            return None
        return f"{self.location.city or ''}_{self.location.country or ''}".lower()

    def summary(self) -> dict[str, Any]:
        """JSON-safe summary for node details and exports."""
        return {
            "id": self.id,
            "name": self.name,
            "title": self.headline,
            "currentCompany": self.current_company.name,
            "location": self.location.full if self.location else None,
            "profileUrl": self.profile_url,
            "totalCompanies": len(self.companies),
            "totalSchools": len(self.education),
            "totalSkills": len(self.skills),
        }


def extract_location(data: Optional[dict[str, Any]]) -> Optional[Location]:
    if not data:
        return None
    return Location(
        city=data.get("city") or None,
        country=data.get("country") or None,
        country_code=data.get("country_code") or None,
        full=data.get("full") or None,
    )


def extract_companies(experiences: Iterable[dict[str, Any]]) -> list[Company]:
    """Group experience entries by normalized company name.

    Insertion order follows the first appearance of each company.
    """
    companies: dict[str, Company] = {}
    for exp in experiences:
        if not exp or not exp.get("company"):
            continue
        key = normalize_company_name(exp["company"])
        if not key:
            continue
        position = Position(
            title=exp.get("title"),
            duration=exp.get("duration"),
            start_date=exp.get("start_date"),
            end_date=exp.get("end_date"),
            is_current=bool(exp.get("is_current")),
            location=exp.get("location"),
        )
        duration = months_between(exp.get("start_date"), exp.get("end_date"))
        existing = companies.get(key)
        if existing is None:
            companies[key] = Company(
                name=exp["company"],
                normalized_name=key,
                positions=[position],
                total_duration=duration,
                company_id=exp.get("company_id"),
                logo=exp.get("company_logo_url"),
                linkedin_url=exp.get("company_linkedin_url"),
            )
        else:
            existing.positions.append(position)
            existing.total_duration += duration
    return list(companies.values())


def extract_education(records: Iterable[dict[str, Any]]) -> list[Education]:
    education = []
    for edu in records:
        if not edu:
            continue
        education.append(Education(
            school=edu.get("school"),
            normalized_school=normalize_school_name(edu.get("school")),
            degree=edu.get("degree") or None,
            duration=edu.get("duration") or None,
            start_date=edu.get("start_date"),
            end_date=edu.get("end_date"),
            activities=edu.get("activities") or None,
            school_id=edu.get("school_id") or None,
            logo=edu.get("school_logo_url"),
            linkedin_url=edu.get("school_linkedin_url"),
        ))
    return education


def extract_skills(experiences: Iterable[dict[str, Any]]) -> list[str]:
    """Collect cleaned, de-duplicated skills across all positions."""
    skills: dict[str, None] = {}
    for exp in experiences:
        if not exp:
            continue
        for skill in exp.get("skills") or []:
            cleaned = clean_skill(skill)
            if cleaned:
                skills.setdefault(cleaned, None)
    return list(skills)


# --------------------------------------------------------------------------- #
# Batch processing
# --------------------------------------------------------------------------- #

@dataclass
class ProcessingStats:
    """Summary of one processing batch.

    Attributes:
        total_people: People successfully processed
        total_companies: Distinct normalized company names
        total_schools: Distinct normalized school names
        total_skills: Distinct skills
        processing_errors: One {"employee", "error"} dict per skipped record
    """

    total_people: int = 0
    total_companies: int = 0
    total_schools: int = 0
    total_skills: int = 0
    processing_errors: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPeople": self.total_people,
            "totalCompanies": self.total_companies,
            "totalSchools": self.total_schools,
            "totalSkills": self.total_skills,
            "processingErrors": list(self.processing_errors),
        }


@dataclass
class ProcessingResult:
    people: list[Person]
    stats: ProcessingStats


def _record_name(record: Any) -> str:
    if isinstance(record, dict):
        info = record.get("basic_info")
        if isinstance(info, dict) and info.get("fullname"):
            return info["fullname"]
        if record.get("name"):
            return str(record["name"])
    return "Unknown"


def process_profiles(raw_records: Any) -> ProcessingResult:
    """Convert raw profile records into Person objects.

    Malformed records are skipped and listed in stats.processing_errors;
    the rest of the batch is still processed.

    Args:
        raw_records: List of raw profile dicts

    Returns:
        ProcessingResult with people and stats

    Raises:
        ValueError: If raw_records is not a list
    """
    if not isinstance(raw_records, list):
        raise ValueError("Invalid employee data provided")

    people: list[Person] = []
    stats = ProcessingStats()

    for record in raw_records:
        try:
            people.append(Person.from_raw(record))
        except ValidationError as e:
            stats.processing_errors.append({
                "employee": _record_name(record),
                "error": str(e),
            })

    companies: set[str] = set()
    schools: set[str] = set()
    skills: set[str] = set()
    for person in people:
        companies.update(person.company_names())
        schools.update(s for s in person.school_names() if s)
        skills.update(person.skills)

    stats.total_people = len(people)
    stats.total_companies = len(companies)
    stats.total_schools = len(schools)
    stats.total_skills = len(skills)

    return ProcessingResult(people=people, stats=stats)


def get_person_by_id(people: Iterable[Person], person_id: str) -> Optional[Person]:
    for person in people:
        if person.id == person_id:
            return person
    return None


def search_people(people: Iterable[Person], query: Optional[str]) -> list[Person]:
    """Case-insensitive search over name, first/last name and headline.

    Queries shorter than two characters return nothing.
    """
    if not query or len(query) < 2:
        return []
    needle = query.lower()
    results = []
    for person in people:
        haystacks = (person.name, person.first_name, person.last_name, person.headline)
        if any(h and needle in h.lower() for h in haystacks):
            results.append(person)
    return results


def filter_people(
    people: Iterable[Person],
    current_company: Optional[str] = None,
    location: Optional[str] = None,
    school: Optional[str] = None,
    company: Optional[str] = None,
) -> list[Person]:
    """Filter people by case-insensitive substring criteria.

    Args:
        people: People to filter
        current_company: Match against the current employer name
        location: Match against the full location text
        school: Match against any school attended
        company: Match against any employer in the work history

    Returns:
        People matching every given criterion
    """
    filtered = list(people)

    if current_company:
        needle = current_company.lower()
        filtered = [
            p for p in filtered
            if p.current_company.name and needle in p.current_company.name.lower()
        ]

    if location:
        needle = location.lower()
        filtered = [
            p for p in filtered
            if p.location and p.location.full and needle in p.location.full.lower()
        ]

    if school:
        needle = school.lower()
        filtered = [
            p for p in filtered
            if any(e.school and needle in e.school.lower() for e in p.education)
        ]

    if company:
        needle = company.lower()
        filtered = [
            p for p in filtered
            if any(needle in c.name.lower() for c in p.companies)
        ]

    return filtered
