import unittest

from blogify.queries import (
    AllPostsQuery,
    BlogPage,
    BreakingNewsQuery,
    CategoryQuery,
    FeaturedQuery,
    SearchQuery,
    select_blog_query,
)


class SelectBlogQueryTests(unittest.TestCase):
    def test_featured_wins_over_everything(self):
        query = select_blog_query(
            featured="true", breaking_news="true", category_type="News", search="x"
        )
        self.assertEqual(query, FeaturedQuery())
        self.assertEqual(query.to_filter(), {"featured": True})

    def test_breaking_news_beats_category(self):
        query = select_blog_query(breaking_news="true", category_type="News")
        self.assertEqual(query.to_filter(), {"breakingNews": True})

    def test_category_filter(self):
        query = select_blog_query(category_type="Sports", search="goal")
        self.assertEqual(query, CategoryQuery("Sports"))
        self.assertEqual(query.to_filter(), {"category": "Sports"})

    def test_all_category_falls_through(self):
        self.assertEqual(select_blog_query(category_type="All"), AllPostsQuery())
        self.assertEqual(
            select_blog_query(category_type="All", search="goal"), SearchQuery("goal")
        )

    def test_search_is_literal_and_case_insensitive(self):
        query = select_blog_query(search="C++")
        self.assertEqual(
            query.to_filter(),
            {"title": {"$regex": r"C\+\+", "$options": "i"}},
        )

    def test_empty_flags_count_as_absent(self):
        query = select_blog_query(featured="", breaking_news="", search="")
        self.assertEqual(query.to_filter(), {})

    def test_any_flag_value_counts_as_present(self):
        self.assertIsInstance(select_blog_query(featured="false"), FeaturedQuery)
        self.assertIsInstance(select_blog_query(breaking_news="0"), BreakingNewsQuery)


class BlogPageTests(unittest.TestCase):
    def test_skip_is_page_times_limit(self):
        self.assertEqual(BlogPage(page=1, limit=5).skip, 5)
        self.assertEqual(BlogPage(page=3, limit=4).skip, 12)

    def test_defaults_return_everything(self):
        window = BlogPage()
        self.assertEqual((window.skip, window.limit), (0, 0))


if __name__ == "__main__":
    unittest.main()
