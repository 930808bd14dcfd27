import unittest
from unittest.mock import MagicMock

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING

from blogify.store import InMemoryDocumentStore, MongoDocumentStore, matches


class MatchesTests(unittest.TestCase):
    def test_dotted_path_equality(self):
        doc = {"author": {"email": "alice@x.com"}}
        self.assertTrue(matches(doc, {"author.email": "alice@x.com"}))
        self.assertFalse(matches(doc, {"author.email": "bob@x.com"}))
        self.assertFalse(matches({"author": "alice"}, {"author.email": "alice"}))

    def test_regex_respects_options(self):
        doc = {"title": "Breaking Waves"}
        self.assertTrue(matches(doc, {"title": {"$regex": "waves", "$options": "i"}}))
        self.assertFalse(matches(doc, {"title": {"$regex": "waves"}}))
        self.assertFalse(matches({}, {"title": {"$regex": "waves", "$options": "i"}}))

    def test_empty_query_matches_everything(self):
        self.assertTrue(matches({"title": "anything"}, {}))


class InMemoryDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()

    def test_insert_and_get_blog(self):
        ack = self.store.insert_blog({"title": "Hello", "author": {"email": "a@x.com"}})
        self.assertTrue(ack.acknowledged)
        blog = self.store.get_blog(ack.inserted_id)
        self.assertEqual(blog["_id"], ack.inserted_id)
        self.assertEqual(blog["title"], "Hello")

    def test_client_supplied_id_is_ignored(self):
        ack = self.store.insert_blog({"_id": "mine", "title": "Hello"})
        self.assertNotEqual(ack.inserted_id, "mine")

    def test_get_blog_rejects_malformed_id(self):
        with self.assertRaises(InvalidId):
            self.store.get_blog("not-an-object-id")

    def test_get_blog_missing(self):
        self.assertIsNone(self.store.get_blog(str(ObjectId())))

    def test_returned_documents_are_copies(self):
        ack = self.store.insert_blog({"title": "Hello", "author": {"email": "a@x.com"}})
        blog = self.store.get_blog(ack.inserted_id)
        blog["author"]["email"] = "mallory@x.com"
        self.assertEqual(
            self.store.get_blog(ack.inserted_id)["author"]["email"], "a@x.com"
        )

    def test_find_blogs_sort_skip_limit(self):
        for day in ("2024-01-03", "2024-01-01", "2024-01-02"):
            self.store.insert_blog({"publishedAt": day})
        self.store.insert_blog({"title": "undated"})

        recent = self.store.find_blogs({}, sort=("publishedAt", DESCENDING), limit=2)
        self.assertEqual(
            [blog["publishedAt"] for blog in recent], ["2024-01-03", "2024-01-02"]
        )

        tail = self.store.find_blogs({}, sort=("publishedAt", DESCENDING), skip=2)
        self.assertEqual(tail[0]["publishedAt"], "2024-01-01")
        self.assertNotIn("publishedAt", tail[1])

    def test_update_blog_merges_fields(self):
        ack = self.store.insert_blog({"title": "Old", "category": "News"})
        result = self.store.update_blog(ack.inserted_id, {"title": "New", "_id": "x"})
        self.assertEqual(result.as_dict()["matchedCount"], 1)
        self.assertEqual(result.as_dict()["modifiedCount"], 1)
        blog = self.store.get_blog(ack.inserted_id)
        self.assertEqual(blog["title"], "New")
        self.assertEqual(blog["category"], "News")
        self.assertEqual(blog["_id"], ack.inserted_id)

    def test_update_without_changes_reports_unmodified(self):
        ack = self.store.insert_blog({"title": "Same"})
        result = self.store.update_blog(ack.inserted_id, {"title": "Same"})
        self.assertEqual((result.matched_count, result.modified_count), (1, 0))

    def test_update_missing_blog(self):
        result = self.store.update_blog(str(ObjectId()), {"title": "New"})
        self.assertEqual(result.as_dict()["matchedCount"], 0)

    def test_delete_blog(self):
        ack = self.store.insert_blog({"title": "Gone"})
        self.assertEqual(self.store.delete_blog(ack.inserted_id).deleted_count, 1)
        self.assertEqual(self.store.delete_blog(ack.inserted_id).deleted_count, 0)
        self.assertEqual(self.store.count_blogs(), 0)

    def test_wishlist_entries(self):
        self.store.insert_wishlist_entry({"postId": "p1", "userEmail": "a@x.com"})
        self.store.insert_wishlist_entry({"postId": "p2", "userEmail": "a@x.com"})
        self.store.insert_wishlist_entry({"postId": "p1", "userEmail": "b@x.com"})

        self.assertIsNotNone(
            self.store.find_wishlist_entry({"postId": "p2", "userEmail": "a@x.com"})
        )
        self.assertEqual(
            len(self.store.find_wishlist_entries({"userEmail": "a@x.com"})), 2
        )

        ack = self.store.delete_wishlist_entry({"postId": "p1"})
        self.assertEqual(ack.as_dict(), {"acknowledged": True, "deletedCount": 1})
        self.assertEqual(len(self.store.wishlists), 2)

    def test_reset(self):
        self.store.insert_blog({"title": "a"})
        self.store.insert_comment({"blogId": "b"})
        self.store.reset()
        self.assertEqual(self.store.count_blogs(), 0)
        self.assertEqual(self.store.find_comments({}), [])


class MongoDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.store = MongoDocumentStore(self.client, "blogifyDB")
        self.store.blogs = MagicMock()
        self.store.comments = MagicMock()
        self.store.wishlists = MagicMock()

    def test_selects_database_and_collections(self):
        client = MagicMock()
        MongoDocumentStore(client, "blogifyDB", wishlists_collection="saved")
        client.__getitem__.assert_called_once_with("blogifyDB")
        database = client.__getitem__.return_value
        names = [call.args[0] for call in database.__getitem__.call_args_list]
        self.assertEqual(names, ["blogs", "comments", "saved"])

    def test_from_url_requires_url(self):
        with self.assertRaises(ValueError):
            MongoDocumentStore.from_url("", "blogifyDB")

    def test_ping(self):
        self.store.ping()
        self.client.admin.command.assert_called_once_with("ping")

    def test_find_blogs_applies_window(self):
        oid = ObjectId()
        cursor = self.store.blogs.find.return_value
        cursor.skip.return_value.limit.return_value = [{"_id": oid, "title": "t"}]

        blogs = self.store.find_blogs({"featured": True}, skip=5, limit=5)

        self.store.blogs.find.assert_called_once_with({"featured": True})
        cursor.skip.assert_called_once_with(5)
        cursor.skip.return_value.limit.assert_called_once_with(5)
        cursor.sort.assert_not_called()
        self.assertEqual(blogs, [{"_id": str(oid), "title": "t"}])

    def test_find_blogs_sorts(self):
        cursor = self.store.blogs.find.return_value
        cursor.sort.return_value.skip.return_value.limit.return_value = []
        self.store.find_blogs({}, sort=("publishedAt", DESCENDING), limit=3)
        cursor.sort.assert_called_once_with("publishedAt", DESCENDING)
        cursor.sort.return_value.skip.return_value.limit.assert_called_once_with(3)

    def test_count_uses_estimate(self):
        self.store.blogs.estimated_document_count.return_value = 42
        self.assertEqual(self.store.count_blogs(), 42)

    def test_get_blog_by_object_id(self):
        oid = ObjectId()
        self.store.blogs.find_one.return_value = {"_id": oid, "title": "t"}
        self.assertEqual(self.store.get_blog(str(oid)), {"_id": str(oid), "title": "t"})
        self.store.blogs.find_one.assert_called_once_with({"_id": oid})

    def test_get_blog_malformed_id(self):
        with self.assertRaises(InvalidId):
            self.store.get_blog("nope")
        self.store.blogs.find_one.assert_not_called()

    def test_insert_blog_does_not_mutate_payload(self):
        oid = ObjectId()
        self.store.blogs.insert_one.return_value = MagicMock(
            inserted_id=oid, acknowledged=True
        )
        payload = {"title": "t"}
        ack = self.store.insert_blog(payload)
        self.assertEqual(ack.as_dict(), {"acknowledged": True, "insertedId": str(oid)})
        self.assertEqual(payload, {"title": "t"})

    def test_update_blog_uses_set(self):
        oid = ObjectId()
        self.store.blogs.update_one.return_value = MagicMock(
            matched_count=1, modified_count=1, upserted_id=None, acknowledged=True
        )
        ack = self.store.update_blog(str(oid), {"_id": str(oid), "title": "New"})
        self.store.blogs.update_one.assert_called_once_with(
            {"_id": oid}, {"$set": {"title": "New"}}
        )
        self.assertEqual(
            ack.as_dict(),
            {
                "acknowledged": True,
                "matchedCount": 1,
                "modifiedCount": 1,
                "upsertedCount": 0,
                "upsertedId": None,
            },
        )

    def test_delete_wishlist_entry(self):
        self.store.wishlists.delete_one.return_value = MagicMock(
            deleted_count=1, acknowledged=True
        )
        ack = self.store.delete_wishlist_entry({"postId": "p1"})
        self.store.wishlists.delete_one.assert_called_once_with({"postId": "p1"})
        self.assertEqual(ack.deleted_count, 1)

    def test_find_comments(self):
        self.store.comments.find.return_value = [{"_id": "c1", "blogId": "b1"}]
        self.assertEqual(
            self.store.find_comments({"blogId": "b1"}), [{"_id": "c1", "blogId": "b1"}]
        )


if __name__ == "__main__":
    unittest.main()
