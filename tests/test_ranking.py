"""Tests for ranking module: top-N groups and palette colors."""

import pytest

from config import OTHER_COLOR, PALETTE
from dimensions import Dimension
from factories import make_person
from ranking import effective_top_n, rank_groups, resolve_labels, tally_groups


@pytest.fixture
def people():
    # company counts: stripe 3, meta 2, google 2, apple 1
    return [
        make_person("a", companies=("Stripe", "Meta")),
        make_person("b", companies=("Stripe", "Google")),
        make_person("c", companies=("Stripe", "Meta", "Google")),
        make_person("d", companies=("Apple Inc.",)),
        make_person("e"),
    ]


class TestEffectiveTopN:
    """Test effective_top_n()."""

    def test_within_palette(self):
        assert effective_top_n(6) == 6

    def test_clamped_to_palette(self):
        assert effective_top_n(20) == len(PALETTE)

    def test_at_least_one(self):
        assert effective_top_n(0) == 1

    def test_small_palette(self):
        assert effective_top_n(5, palette=("#000", "#111")) == 2


class TestTallyGroups:
    """Test tally_groups() and resolve_labels()."""

    def test_counts_people_per_key(self, people):
        counts = tally_groups(people, "company")
        assert counts == {"stripe": 3, "meta": 2, "google": 2, "apple": 1}

    def test_person_counted_once_per_key(self):
        person = make_person("a", skills=("Go", "go"))
        assert tally_groups([person], "skills") == {"go": 1}

    def test_unknown_location_not_counted(self):
        people = [make_person("a", country="Canada"), make_person("b", city="Toronto")]
        assert tally_groups(people, "location") == {"toronto": 1}

    def test_labels_from_first_holder(self, people):
        assert resolve_labels(people, "company")["apple"] == "Apple Inc."


class TestRankGroups:
    """Test rank_groups()."""

    def test_orders_by_count_then_key(self, people):
        ranking = rank_groups(people, "company", top_n=3)
        assert ranking.featured_keys() == ["stripe", "google", "meta"]
        assert [g.rank for g in ranking.top_groups] == [0, 1, 2]

    def test_colors_by_rank(self, people):
        ranking = rank_groups(people, "company", top_n=3)
        assert [g.color for g in ranking.top_groups] == list(PALETTE[:3])

    def test_overflow_color(self, people):
        ranking = rank_groups(people, "company", top_n=2)
        assert ranking.color_for("stripe") == PALETTE[0]
        assert ranking.color_for("meta") == OTHER_COLOR
        assert ranking.color_for("nonexistent") == OTHER_COLOR
        assert ranking.color_for(None) == OTHER_COLOR

    def test_overflow_keys(self, people):
        ranking = rank_groups(people, "company", top_n=2)
        assert ranking.overflow_keys() == ["meta", "apple"]

    def test_top_n_clamped_to_palette(self):
        population = [make_person(f"p{i}", skills=(f"skill{i}",)) for i in range(20)]
        ranking = rank_groups(population, "skills", top_n=20)
        assert ranking.requested_top_n == 20
        assert ranking.effective_top_n == 15
        assert len(ranking.top_groups) == 15

    def test_fewer_groups_than_top_n(self, people):
        ranking = rank_groups(people, "company", top_n=12)
        assert len(ranking.top_groups) == 4

    def test_featured_memberships_in_rank_order(self, people):
        ranking = rank_groups(people, "company", top_n=3)
        # c lists Stripe, Meta, Google; ranks are stripe, google, meta
        assert ranking.featured_memberships(people[2]) == ["stripe", "google", "meta"]
        assert ranking.featured_memberships(people[3]) == []

    def test_rank_of_and_labels(self, people):
        ranking = rank_groups(people, "company", top_n=3)
        assert ranking.rank_of("google") == 1
        assert ranking.rank_of("apple") is None
        assert ranking.is_featured("meta")
        assert not ranking.is_featured("apple")
        assert ranking.label_for("apple") == "Apple Inc."
        assert ranking.label_for("zzz") == "zzz"

    def test_deterministic(self, people):
        first = rank_groups(people, "company", top_n=3)
        second = rank_groups(list(reversed(people)), "company", top_n=3)
        assert first.featured_keys() == second.featured_keys()

    def test_empty_population(self):
        ranking = rank_groups([], "education", top_n=6)
        assert ranking.top_groups == ()
        assert ranking.counts == {}

    def test_dimension_normalized(self, people):
        assert rank_groups(people, "company", top_n=3).dimension is Dimension.COMPANY
