#!/usr/bin/env python3
"""Generate a seeded sample population of raw people profiles.

Usage:
    python scripts/generate_sample_profiles.py                 # 60 profiles
    python scripts/generate_sample_profiles.py --count 150     # bigger team
    python scripts/generate_sample_profiles.py --output data/profiles.json

Profiles follow schemas/profile.json and feed scripts/run_network.py.
"""

import argparse
import json
import random
from pathlib import Path

SEED = 42

FIRST_NAMES = [
    "Ada", "Ben", "Chloe", "Dev", "Elena", "Farid", "Grace", "Hiro", "Ines",
    "Jonas", "Kira", "Luis", "Maya", "Nikhil", "Olga", "Priya", "Quinn",
    "Ravi", "Sofia", "Tomas", "Uma", "Victor", "Wen", "Yara", "Zane",
]

LAST_NAMES = [
    "Anders", "Baptiste", "Chen", "Diaz", "Eriksen", "Fischer", "Gupta",
    "Haddad", "Ito", "Jensen", "Kowalski", "Lopez", "Moreau", "Nakamura",
    "Okafor", "Petrov", "Rossi", "Silva", "Tanaka", "Weber",
]

# (school name, canonical id or None)
SCHOOLS = [
    ("Stanford University", "1792"),
    ("Massachusetts Institute of Technology", "1503"),
    ("University of California, Berkeley", "2517"),
    ("Carnegie Mellon University", "4600"),
    ("University of Waterloo", "5090"),
    ("Georgia Institute of Technology", "3286"),
    ("University of Michigan", "1901"),
    ("ETH Zurich", None),
    ("Indian Institute of Technology, Bombay", None),
    ("University of Toronto", "3660"),
    ("Tsinghua University", None),
    ("University of Washington", "3662"),
    ("Cornell University", "2089"),
    ("Imperial College London", None),
    ("Universidad de Buenos Aires", None),
    ("General Assembly", None),
]

COMPANIES = [
    "Google", "Meta", "Amazon", "Microsoft", "Apple Inc.", "Stripe",
    "Airbnb", "Uber Technologies Inc", "Salesforce", "Shopify", "Datadog",
    "Snowflake Inc.", "Atlassian Corp", "Twilio", "Palantir Technologies",
    "Nvidia Corp", "Intuit", "Dropbox", "Square", "Pinterest",
]

TITLES = [
    "Software Engineering Intern", "Software Engineer", "Senior Software Engineer",
    "Staff Engineer", "Engineering Manager", "Product Manager", "Data Scientist",
    "Senior Data Scientist", "Director of Engineering", "Principal Engineer",
]

SKILLS = [
    "Python", "Java", "Go", "TypeScript", "React", "Kubernetes", "AWS",
    "Machine Learning", "SQL", "Distributed Systems", "Data Analysis",
    "Leadership", "Product Management", "Terraform", "PostgreSQL", "Rust",
    "Spark", "GraphQL", "C++", "System Design",
]

LOCATIONS = [
    ("San Francisco", "United States", "US"),
    ("New York", "United States", "US"),
    ("Seattle", "United States", "US"),
    ("Austin", "United States", "US"),
    ("Toronto", "Canada", "CA"),
    ("London", "United Kingdom", "GB"),
    ("Berlin", "Germany", "DE"),
    ("Bangalore", "India", "IN"),
    ("Zurich", "Switzerland", "CH"),
    (None, "United States", "US"),
]

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _date(rng, year):
    return {"year": year, "month": rng.choice(MONTHS)}


def generate_profile(rng, index):
    """Build one raw profile record."""
    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    identifier = f"{first.lower()}-{last.lower()}-{index:04d}"

    city, country, code = rng.choice(LOCATIONS)
    full = ", ".join(part for part in (city, country) if part)

    experience = []
    year = rng.randint(2008, 2016)
    for position in range(rng.randint(1, 4)):
        start = year
        year = min(2026, year + rng.randint(1, 4))
        is_current = position == 3 or rng.random() < 0.2
        skills = rng.sample(SKILLS, rng.randint(0, 4))
        if skills and rng.random() < 0.15:
            skills[-1] = f"{skills[-1]} and +{rng.randint(1, 5)} skills"
        experience.append({
            "company": rng.choice(COMPANIES),
            "title": rng.choice(TITLES),
            "start_date": _date(rng, start),
            "end_date": None if is_current else _date(rng, year),
            "is_current": is_current,
            "skills": skills,
        })
        if is_current:
            break

    education = []
    for _ in range(rng.randint(0, 2)):
        school, school_id = rng.choice(SCHOOLS)
        grad = rng.randint(2004, 2018)
        education.append({
            "school": school,
            "school_id": school_id,
            "degree": rng.choice(["BS", "MS", "PhD", "MBA", None]),
            "start_date": {"year": grad - 4},
            "end_date": {"year": grad} if rng.random() > 0.1 else None,
        })

    current = next((e["company"] for e in experience if e["is_current"]), None)

    return {
        "profileUrl": f"https://www.example.com/in/{identifier}",
        "basic_info": {
            "public_identifier": identifier,
            "fullname": f"{first} {last}",
            "first_name": first,
            "last_name": last,
            "headline": experience[-1]["title"] if experience else None,
            "current_company": current,
            "location": {
                "city": city,
                "country": country,
                "country_code": code,
                "full": full,
            },
        },
        "experience": experience,
        "education": education,
    }


def main():
    parser = argparse.ArgumentParser(description="Generate sample people profiles.")
    parser.add_argument("--count", type=int, default=60, help="Number of profiles (default: 60)")
    parser.add_argument("--seed", type=int, default=SEED, help=f"Random seed (default: {SEED})")
    parser.add_argument(
        "--output", default="data/profiles.json",
        help="Output JSON path (default: data/profiles.json)",
    )
    args = parser.parse_args()

    rng = random.Random(args.seed)
    profiles = [generate_profile(rng, i) for i in range(args.count)]

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(profiles, f, indent=2, ensure_ascii=False)

    print(f"Wrote {len(profiles)} profiles to {output}")


if __name__ == "__main__":
    main()
