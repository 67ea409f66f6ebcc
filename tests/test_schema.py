"""Tests for JSON schema validation of raw people profiles."""

import pytest

from schema import ValidationError, is_valid_profile, validate_profile


class TestValidateProfile:
    """Test validation of raw profile records."""

    def test_valid_minimal_profile(self):
        """Should accept a profile with only an identifier."""
        validate_profile({"basic_info": {"public_identifier": "jane-doe"}})

    def test_valid_full_profile(self):
        """Should accept a complete profile."""
        profile = {
            "profileUrl": "https://www.example.com/in/jane-doe",
            "basic_info": {
                "public_identifier": "jane-doe",
                "fullname": "Jane Doe",
                "first_name": "Jane",
                "last_name": "Doe",
                "headline": "Staff Engineer",
                "current_company": "Stripe",
                "location": {
                    "city": "Seattle",
                    "country": "United States",
                    "country_code": "US",
                    "full": "Seattle, United States",
                },
            },
            "experience": [
                {
                    "company": "Stripe",
                    "title": "Staff Engineer",
                    "start_date": {"year": 2021, "month": "Mar"},
                    "end_date": None,
                    "is_current": True,
                    "skills": ["Go", "Distributed Systems"],
                },
            ],
            "education": [
                {
                    "school": "University of Washington",
                    "school_id": "3662",
                    "degree": "BS",
                    "start_date": {"year": 2010},
                    "end_date": {"year": 2014},
                },
            ],
        }
        validate_profile(profile)

    def test_allows_null_optional_fields(self):
        profile = {
            "basic_info": {"public_identifier": "x", "headline": None, "location": None},
            "experience": None,
            "education": None,
        }
        validate_profile(profile)

    def test_rejects_non_object(self):
        with pytest.raises(ValidationError):
            validate_profile(["not", "a", "profile"])

    def test_rejects_missing_basic_info(self):
        with pytest.raises(ValidationError, match="Missing basic_info or public_identifier"):
            validate_profile({"experience": []})

    def test_rejects_missing_identifier(self):
        with pytest.raises(ValidationError, match="Missing basic_info or public_identifier"):
            validate_profile({"basic_info": {"fullname": "No Id"}})

    def test_rejects_empty_identifier(self):
        with pytest.raises(ValidationError, match="Missing basic_info or public_identifier"):
            validate_profile({"basic_info": {"public_identifier": ""}})

    def test_rejects_wrong_experience_type(self):
        """Should name the offending field."""
        profile = {
            "basic_info": {"public_identifier": "x"},
            "experience": "Stripe",
        }
        with pytest.raises(ValidationError, match="Validation failed for experience"):
            validate_profile(profile)

    def test_rejects_non_string_skill(self):
        profile = {
            "basic_info": {"public_identifier": "x"},
            "experience": [{"company": "Stripe", "skills": [42]}],
        }
        with pytest.raises(ValidationError, match="experience.0.skills.0"):
            validate_profile(profile)


class TestIsValidProfile:
    """Test is_valid_profile helper."""

    def test_true_for_valid(self):
        assert is_valid_profile({"basic_info": {"public_identifier": "x"}})

    def test_false_for_invalid(self):
        assert not is_valid_profile({"basic_info": {}})
        assert not is_valid_profile(None)
