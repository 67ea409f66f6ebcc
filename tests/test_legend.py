"""Tests for legend module."""

from config import OTHER_COLOR, PALETTE
from factories import make_person
from legend import OTHER_KEY, build_legend, featured_entries, other_entry
from ranking import rank_groups


def _city_people():
    """Eight cities; the two smallest fall outside a top six."""
    cities = {
        "Seattle": 4, "Austin": 3, "Berlin": 3, "London": 2,
        "Toronto": 2, "Zurich": 2, "Bangalore": 1, "Paris": 1,
    }
    people = []
    for city, count in cities.items():
        for i in range(count):
            people.append(make_person(f"{city.lower()}-{i}", city=city, country="Earth"))
    # No rankable location
    people.append(make_person("nowhere"))
    people.append(make_person("country-only", country="Earth"))
    return people


class TestFeaturedEntries:
    """Test featured legend rows."""

    def test_sorted_by_count_then_label(self):
        people = _city_people()
        ranking = rank_groups(people, "location", top_n=6)
        entries = featured_entries(ranking)
        assert [e.label for e in entries] == [
            "Seattle", "Austin", "Berlin", "London", "Toronto", "Zurich",
        ]
        assert [e.count for e in entries] == [4, 3, 3, 2, 2, 2]

    def test_colors_match_ranking(self):
        ranking = rank_groups(_city_people(), "location", top_n=6)
        for entry in featured_entries(ranking):
            assert entry.color == ranking.color_for(entry.key)
            assert entry.color in PALETTE

    def test_no_duplicate_colors(self):
        ranking = rank_groups(_city_people(), "location", top_n=6)
        colors = [e.color for e in featured_entries(ranking)]
        assert len(colors) == len(set(colors))


class TestOtherEntry:
    """Test the collapsed overflow row."""

    def test_counts_distinct_people_and_groups(self):
        people = _city_people()
        ranking = rank_groups(people, "location", top_n=6)
        other = other_entry(ranking, people)
        assert other.key == OTHER_KEY
        assert other.color == OTHER_COLOR
        assert other.count == 2
        assert other.group_count == 2
        assert other.label == "Other Location (2)"

    def test_person_in_several_overflow_groups_counted_once(self):
        people = [make_person(f"p{i}", skills=(f"top{i}", "shared")) for i in range(6)]
        people.append(make_person("multi", skills=("xrare1", "xrare2")))
        ranking = rank_groups(people, "skills", top_n=6)
        # shared has 6 members; top0..top4 fill the rest of the top six
        other = other_entry(ranking, people)
        assert other.count == 1
        assert other.group_count == 2

    def test_person_with_a_featured_key_stays_out(self):
        # p5 holds featured "shared" and overflow "top5"
        people = [make_person(f"p{i}", skills=(f"top{i}", "shared")) for i in range(6)]
        ranking = rank_groups(people, "skills", top_n=6)
        assert not ranking.is_featured("top5")
        assert other_entry(ranking, people) is None

    def test_none_without_overflow(self):
        people = [make_person("a", skills=("Go",)), make_person("b", skills=("Rust",))]
        ranking = rank_groups(people, "skills", top_n=6)
        assert other_entry(ranking, people) is None


class TestBuildLegend:
    """Test build_legend()."""

    def test_pairwise_appends_other(self):
        people = _city_people()
        ranking = rank_groups(people, "location", top_n=6)
        legend = build_legend(ranking, people, "pairwise")
        assert len(legend) == 7
        assert legend[-1].kind == "other"

    def test_bipartite_has_no_other(self):
        people = _city_people()
        ranking = rank_groups(people, "location", top_n=6)
        legend = build_legend(ranking, people, "bipartite")
        assert len(legend) == 6
        assert all(e.kind == "group" for e in legend)

    def test_counts_cover_everyone_with_a_location(self):
        """Featured counts plus the other row add up to everyone with a city."""
        people = _city_people()
        ranking = rank_groups(people, "location", top_n=6)
        legend = build_legend(ranking, people, "pairwise")
        assert sum(e.count for e in legend) == 18

    def test_counts_cover_everyone_with_a_school(self):
        """A person in one featured and one overflow school is counted once."""
        people = []
        for i in range(6):
            school = (f"School {i}", f"s{i}")
            people.append(make_person(f"p{i}a", schools=(school,)))
            people.append(make_person(f"p{i}b", schools=(school,)))
        people.append(make_person("z", schools=(("School 0", "s0"), ("Rare", "rare"))))
        people.append(make_person("gray", schools=(("Rarer", "rarer"),)))

        ranking = rank_groups(people, "education", top_n=6)
        legend = build_legend(ranking, people, "pairwise")
        assert sum(e.count for e in legend) == len(people)
        other = legend[-1]
        assert other.count == 1
        assert other.label == "Other Education (1)"

    def test_to_dict(self):
        people = _city_people()
        ranking = rank_groups(people, "location", top_n=6)
        rows = [e.to_dict() for e in build_legend(ranking, people, "pairwise")]
        assert rows[0] == {
            "key": "seattle", "label": "Seattle", "color": PALETTE[0], "count": 4, "type": "group",
        }
        assert rows[-1]["groupCount"] == 2
