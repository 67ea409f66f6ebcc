"""Builders for Person objects and raw profile records used across tests."""

from __future__ import annotations

from typing import Any, Optional

from people import (
    Company,
    Education,
    Location,
    Person,
    Position,
    normalize_company_name,
    normalize_school_name,
)


def make_person(
    pid: str,
    schools: tuple = (),
    companies: tuple = (),
    skills: tuple = (),
    city: Optional[str] = None,
    country: Optional[str] = None,
    name: Optional[str] = None,
) -> Person:
    """Build a Person directly, skipping raw-profile parsing.

    schools items are either a school name or a (name, school_id) tuple.
    """
    education = []
    for school in schools:
        school_name, school_id = school if isinstance(school, tuple) else (school, None)
        education.append(Education(
            school=school_name,
            normalized_school=normalize_school_name(school_name),
            school_id=school_id,
        ))

    location = None
    if city or country:
        full = ", ".join(part for part in (city, country) if part)
        location = Location(city=city, country=country, full=full)

    return Person(
        id=pid,
        name=name or pid.title(),
        first_name=(name or pid.title()).split(" ")[0],
        location=location,
        companies=[
            Company(name=c, normalized_name=normalize_company_name(c), positions=[Position()])
            for c in companies
        ],
        education=education,
        skills=list(skills),
    )


def raw_profile(
    identifier: Optional[str] = "jane-doe",
    fullname: str = "Jane Doe",
    **extra: Any,
) -> dict[str, Any]:
    """Minimal valid raw profile; extra keys are merged at the top level."""
    basic_info: dict[str, Any] = {
        "fullname": fullname,
        "first_name": fullname.split(" ")[0],
        "last_name": fullname.split(" ")[-1],
    }
    if identifier is not None:
        basic_info["public_identifier"] = identifier
    record: dict[str, Any] = {"basic_info": basic_info}
    record.update(extra)
    return record
