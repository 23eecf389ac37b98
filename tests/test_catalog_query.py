"""
Tests for catalog filtering, tag classification and pagination.
"""
from streamverse.services.catalog_query import list_tags, query
from streamverse.services.tags import TagKind, classify_tags, classify_token


class TestTags:

    def test_split_and_classify(self):
        tags = classify_tags("News; India ;Entertainment;;news;INDIA")

        assert tags.categories == ("News", "Entertainment")
        assert tags.countries == ("India",)

    def test_country_abbreviations(self):
        assert classify_token("USA") == TagKind.COUNTRY
        assert classify_token("uk") == TagKind.COUNTRY
        assert classify_token("United Arab Emirates") == TagKind.COUNTRY
        assert classify_token("Sports") == TagKind.CATEGORY

    def test_has_is_case_insensitive(self):
        tags = classify_tags("Sports;UK")
        assert tags.has(TagKind.CATEGORY, "SPORTS")
        assert tags.has(TagKind.COUNTRY, "uk")
        assert not tags.has(TagKind.CATEGORY, "uk")


class TestQuery:

    def test_no_filters_returns_everything_in_catalog_order(self, sample_catalog):
        result = query(sample_catalog)

        assert result.total == len(sample_catalog.channels)
        assert [c.id for c in result.channels] == [c.id for c in sample_catalog.channels]

    def test_alternatives_count(self, sample_catalog):
        result = query(sample_catalog)

        for item in result.channels:
            assert item.alternatives_count == len(sample_catalog.alternatives.get(item.id, []))
        assert result.channels[0].alternatives_count == 2
        assert result.channels[1].alternatives_count == 0

    def test_category_filter(self, sample_catalog):
        result = query(sample_catalog, category="news")

        assert result.total == 2
        assert all(classify_tags(c.category).has(TagKind.CATEGORY, "news") for c in result.channels)

    def test_country_filter(self, sample_catalog):
        result = query(sample_catalog, country="uk")
        assert [c.name for c in result.channels] == ["Sky Sports"]

        result = query(sample_catalog, category="News", country="India")
        assert [c.name for c in result.channels] == ["Aaj Tak"]

    def test_unmatched_category_is_empty_not_error(self, sample_catalog):
        result = query(sample_catalog, category="cooking")
        assert result.channels == []
        assert result.total == 0

    def test_all_means_no_filter(self, sample_catalog):
        assert query(sample_catalog, category="all").total == len(sample_catalog.channels)

    def test_search_matches_name_only(self, sample_catalog):
        assert [c.name for c in query(sample_catalog, search="JAZZ").channels] == ["Jazz Radio"]
        # "Music" is a category, not part of any name
        assert query(sample_catalog, search="music").total == 0

    def test_pagination_reports_true_total(self, sample_catalog):
        result = query(sample_catalog, offset=1, limit=2)

        assert result.total == 4
        assert [c.id for c in result.channels] == [1, 2]

    def test_restrict_to_channel_ids(self, sample_catalog):
        result = query(sample_catalog, channel_ids={0, 3})
        assert [c.id for c in result.channels] == [0, 3]


class TestListTags:

    def test_categories_and_countries(self, sample_catalog):
        categories, countries = list_tags(sample_catalog)

        assert categories == ["Music", "News", "Sports"]
        assert countries == ["India", "UK"]
