"""Unit tests for RecordStore."""

import threading
import unittest

from src.engine.record_store import RecordStore
from src.middleware.exceptions import (
    ConflictingFieldOpError,
    EmptyPatchError,
    InvalidKeyError,
    RecordNotFoundError,
    ReservedFieldError,
    StorageValidationError,
)
from tests.fakes import FakeClock


class RecordStoreTestCase(unittest.TestCase):
    """Base fixture with a store on a fake clock."""

    def setUp(self):
        """Set up test fixtures."""
        self.clock = FakeClock()
        self.store = RecordStore(clock=self.clock)

    def assertIndexMatches(self, expected_keys):
        self.assertEqual(
            {(sort_key, partition_key) for partition_key, sort_key in expected_keys},
            self.store.index_keys(),
        )


class TestPutAndGet(RecordStoreTestCase):
    """Test cases for put and get."""

    def test_put_then_get_returns_record(self):
        """Test that a stored record can be read back."""
        # Act
        stored = self.store.put("U1", "PROFILE#t0", {"name": "Ann", "age": 30})
        fetched = self.store.get("U1", "PROFILE#t0")

        # Assert
        self.assertEqual(stored, fetched)
        self.assertEqual({"name": "Ann", "age": 30}, fetched.attributes)
        self.assertEqual(self.clock(), fetched.created_at)
        self.assertIsNone(fetched.updated_at)
        self.assertIsNone(fetched.expires_at)

    def test_get_missing_returns_none(self):
        """Test that reading an absent key returns None."""
        self.assertIsNone(self.store.get("U1", "PROFILE#t0"))

    def test_put_replaces_and_keeps_created_at(self):
        """Test that a second put at the same key replaces the record."""
        # Arrange
        first = self.store.put("U1", "PROFILE#t0", {"name": "Ann", "email": "a@x"})
        self.clock.advance(5)

        # Act
        second = self.store.put("U1", "PROFILE#t0", {"name": "Bob"})

        # Assert
        self.assertEqual(1, len(self.store))
        self.assertEqual({"name": "Bob"}, self.store.get("U1", "PROFILE#t0").attributes)
        self.assertEqual(first.created_at, second.created_at)
        self.assertEqual(self.clock(), second.updated_at)

    def test_put_rejects_managed_attributes(self):
        """Test that attributes may not name store-managed fields."""
        for field_name in ["partitionKey", "sortKey", "createdAt", "updatedAt"]:
            with self.assertRaises(ReservedFieldError):
                self.store.put("U1", "PROFILE#t0", {field_name: "x"})
        self.assertEqual(0, len(self.store))

    def test_put_rejects_invalid_expires_at(self):
        """Test that expiresAt must be a positive integer."""
        for value in ["soon", 0, -5, True, 1.5]:
            with self.assertRaises(StorageValidationError):
                self.store.put("U1", "PROFILE#t0", {"expiresAt": value})

    def test_put_rejects_invalid_keys(self):
        """Test that empty keys are rejected."""
        with self.assertRaises(InvalidKeyError):
            self.store.put("", "PROFILE#t0", {})

    def test_returned_record_is_a_copy(self):
        """Test that mutating a returned record does not change the store."""
        # Arrange
        record = self.store.put("U1", "PROFILE#t0", {"name": "Ann"})

        # Act
        record.attributes["name"] = "Mallory"

        # Assert
        self.assertEqual("Ann", self.store.get("U1", "PROFILE#t0").attributes["name"])


class TestQueries(RecordStoreTestCase):
    """Test cases for partition queries, sort prefix queries and scans."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.store.put("U1", "DETAIL#address#2024-01-03T00:00:00.000Z", {"city": "Oslo"})
        self.store.put("U1", "PROFILE#2024-01-01T00:00:00.000Z", {"name": "Ann"})
        self.store.put("U1", "DETAIL#address#2024-01-02T00:00:00.000Z", {"city": "Rome"})
        self.store.put("U2", "DETAIL#phone#2024-01-01T00:00:00.000Z", {"phone": "555"})
        self.store.put("U10", "PROFILE#2024-01-01T00:00:00.000Z", {"name": "Zed"})

    def test_query_by_partition_with_prefix_is_ordered(self):
        """Test that a prefix query returns matching records in sort key order."""
        # Act
        records = self.store.query_by_partition("U1", "DETAIL")

        # Assert
        self.assertEqual(
            [
                "DETAIL#address#2024-01-02T00:00:00.000Z",
                "DETAIL#address#2024-01-03T00:00:00.000Z",
            ],
            [record.sort_key for record in records],
        )

    def test_query_by_partition_excludes_other_partitions(self):
        """Test that a partition query never leaks into neighbouring partitions."""
        records = self.store.query_by_partition("U1")

        self.assertEqual(3, len(records))
        self.assertTrue(all(record.partition_key == "U1" for record in records))

    def test_query_by_partition_unknown_partition(self):
        """Test that an unknown partition yields an empty list."""
        self.assertEqual([], self.store.query_by_partition("U9"))

    def test_query_by_sort_prefix_spans_partitions(self):
        """Test that the secondary index finds records from every partition."""
        # Act
        records = self.store.query_by_sort_prefix("DETAIL#")

        # Assert
        self.assertEqual(
            [
                ("U1", "DETAIL#address#2024-01-02T00:00:00.000Z"),
                ("U1", "DETAIL#address#2024-01-03T00:00:00.000Z"),
                ("U2", "DETAIL#phone#2024-01-01T00:00:00.000Z"),
            ],
            [(record.partition_key, record.sort_key) for record in records],
        )

    def test_query_by_sort_prefix_orders_ties_by_partition(self):
        """Test that equal sort keys are ordered by partition key."""
        records = self.store.query_by_sort_prefix("PROFILE#")

        self.assertEqual(["U1", "U10"], [record.partition_key for record in records])

    def test_scan_returns_every_record(self):
        """Test that a scan returns all live records."""
        self.assertEqual(5, len(self.store.scan()))


class TestPatch(RecordStoreTestCase):
    """Test cases for patch."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.created = self.store.put(
            "U1", "PROFILE#t0", {"name": "Ann", "email": "a@x", "age": 30}
        )
        self.clock.advance(1)

    def test_patch_removes_then_sets(self):
        """Test that a patch applies removes and sets and stamps updatedAt."""
        # Act
        updated = self.store.patch(
            "U1", "PROFILE#t0", set_fields={"name": "Ann B"}, remove_fields=["email"]
        )

        # Assert
        self.assertEqual({"name": "Ann B", "age": 30}, updated.attributes)
        self.assertEqual(self.created.created_at, updated.created_at)
        self.assertEqual(self.clock(), updated.updated_at)
        self.assertEqual(updated, self.store.get("U1", "PROFILE#t0"))

    def test_patch_missing_record_raises(self):
        """Test that patching an absent record raises RecordNotFoundError."""
        with self.assertRaises(RecordNotFoundError):
            self.store.patch("U1", "PROFILE#missing", set_fields={"name": "X"})

    def test_failed_patch_leaves_record_untouched(self):
        """Test that a rejected patch changes nothing."""
        # Arrange
        invalid_patches = [
            ({"name": "X"}, ["name"], ConflictingFieldOpError),
            ({"sortKey": "X"}, [], ReservedFieldError),
            ({"name": "X"}, ["createdAt"], ReservedFieldError),
            ({}, [], EmptyPatchError),
            ({"name": "X", "expiresAt": -1}, [], StorageValidationError),
        ]

        # Act & Assert
        for set_fields, remove_fields, error in invalid_patches:
            with self.assertRaises(error):
                self.store.patch("U1", "PROFILE#t0", set_fields, remove_fields)
            self.assertEqual(self.created, self.store.get("U1", "PROFILE#t0"))

    def test_patch_sets_and_clears_expiry(self):
        """Test that expiresAt can be set and removed through a patch."""
        # Arrange
        expires_at = self.clock.epoch() + 3600

        # Act
        with_ttl = self.store.patch("U1", "PROFILE#t0", set_fields={"expiresAt": expires_at})
        without_ttl = self.store.patch("U1", "PROFILE#t0", remove_fields=["expiresAt"])

        # Assert
        self.assertEqual(expires_at, with_ttl.expires_at)
        self.assertNotIn("expiresAt", with_ttl.attributes)
        self.assertIsNone(without_ttl.expires_at)

    def test_patch_with_bare_string_remove_changes_nothing(self):
        """Test that a string remove list is rejected instead of split into characters."""
        # Arrange
        self.store.patch("U1", "PROFILE#t0", set_fields={"n": 1})
        before = self.store.get("U1", "PROFILE#t0")

        # Act
        with self.assertRaises(StorageValidationError):
            self.store.patch("U1", "PROFILE#t0", remove_fields="name")

        # Assert
        self.assertEqual(before, self.store.get("U1", "PROFILE#t0"))

    def test_patch_removing_unknown_field_is_allowed(self):
        """Test that removing a field the record lacks is not an error."""
        updated = self.store.patch("U1", "PROFILE#t0", remove_fields=["nickname"])

        self.assertEqual(self.created.attributes, updated.attributes)


class TestDelete(RecordStoreTestCase):
    """Test cases for delete."""

    def test_delete_is_idempotent(self):
        """Test that deleting twice leaves the same state and never raises."""
        # Arrange
        self.store.put("U1", "PROFILE#t0", {"name": "Ann"})

        # Act
        first = self.store.delete("U1", "PROFILE#t0")
        second = self.store.delete("U1", "PROFILE#t0")

        # Assert
        self.assertTrue(first)
        self.assertFalse(second)
        self.assertIsNone(self.store.get("U1", "PROFILE#t0"))
        self.assertEqual(set(), self.store.index_keys())

    def test_delete_missing_key_is_noop(self):
        """Test that deleting a key that never existed is not an error."""
        self.assertFalse(self.store.delete("U1", "PROFILE#never"))


class TestExpiry(RecordStoreTestCase):
    """Test cases for TTL handling."""

    def test_expired_record_is_hidden_from_every_read(self):
        """Test that a record past its TTL is absent from get, query and scan."""
        # Arrange
        self.store.put("U1", "PROFILE#t0", {"name": "Ann", "expiresAt": self.clock.epoch() + 10})
        self.store.put("U1", "DETAIL#a#t0", {"city": "Oslo"})

        # Act
        self.clock.advance(10)

        # Assert
        self.assertIsNone(self.store.get("U1", "PROFILE#t0"))
        self.assertEqual(["DETAIL#a#t0"], [r.sort_key for r in self.store.query_by_partition("U1")])
        self.assertEqual([], self.store.query_by_sort_prefix("PROFILE"))
        self.assertEqual(1, len(self.store.scan()))
        # physically present until reaped
        self.assertEqual(2, len(self.store))

    def test_record_visible_before_expiry(self):
        """Test that a record is readable until its TTL has elapsed."""
        self.store.put("U1", "PROFILE#t0", {"expiresAt": self.clock.epoch() + 10})
        self.clock.advance(9)

        self.assertIsNotNone(self.store.get("U1", "PROFILE#t0"))

    def test_patch_on_expired_record_raises(self):
        """Test that an expired record cannot be patched."""
        self.store.put("U1", "PROFILE#t0", {"expiresAt": self.clock.epoch() + 1})
        self.clock.advance(2)

        with self.assertRaises(RecordNotFoundError):
            self.store.patch("U1", "PROFILE#t0", set_fields={"name": "X"})

    def test_put_over_expired_record_starts_fresh(self):
        """Test that replacing an expired record resets createdAt."""
        # Arrange
        self.store.put("U1", "PROFILE#t0", {"expiresAt": self.clock.epoch() + 1})
        self.clock.advance(2)

        # Act
        record = self.store.put("U1", "PROFILE#t0", {"name": "New"})

        # Assert
        self.assertEqual(self.clock(), record.created_at)
        self.assertIsNone(record.updated_at)
        self.assertIsNone(record.expires_at)

    def test_expired_keys_and_delete_expired(self):
        """Test that only records still expired are removed."""
        # Arrange
        self.store.put("U1", "PROFILE#t0", {"expiresAt": self.clock.epoch() + 1})
        self.store.put("U1", "DETAIL#a#t0", {})
        self.clock.advance(2)

        # Act
        expired = self.store.expired_keys()
        self.store.put("U1", "PROFILE#t0", {"name": "Revived"})
        removed = self.store.delete_expired("U1", "PROFILE#t0")

        # Assert
        self.assertEqual([("U1", "PROFILE#t0")], expired)
        self.assertFalse(removed)
        self.assertEqual("Revived", self.store.get("U1", "PROFILE#t0").attributes["name"])


class TestIndexConsistency(RecordStoreTestCase):
    """Test that the secondary index mirrors the table after every mutation."""

    def test_index_follows_mutations(self):
        """Test index contents across puts, patches and deletes."""
        # Act & Assert
        self.store.put("U1", "PROFILE#t0", {"name": "Ann"})
        self.store.put("U2", "PROFILE#t0", {"name": "Bob"})
        self.assertIndexMatches({("U1", "PROFILE#t0"), ("U2", "PROFILE#t0")})

        self.store.put("U1", "PROFILE#t0", {"name": "Ann again"})
        self.store.patch("U2", "PROFILE#t0", set_fields={"age": 40})
        self.assertIndexMatches({("U1", "PROFILE#t0"), ("U2", "PROFILE#t0")})

        self.store.delete("U1", "PROFILE#t0")
        self.assertIndexMatches({("U2", "PROFILE#t0")})

    def test_concurrent_puts_keep_index_consistent(self):
        """Test that puts from many threads leave one entry per record."""
        # Arrange
        def writer(worker):
            for i in range(50):
                self.store.put(f"U{worker}", f"ACTIVITY#login#{i:03d}", {"n": i})

        threads = [threading.Thread(target=writer, args=(worker,)) for worker in range(8)]

        # Act
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Assert
        self.assertEqual(400, len(self.store))
        self.assertEqual(400, len(self.store.index_keys()))
        self.assertEqual(400, len(self.store.query_by_sort_prefix("ACTIVITY#login#")))


class TestScenarios(RecordStoreTestCase):
    """End-to-end scenarios across operations."""

    def test_profile_lifecycle(self):
        """Test put, patch, query and delete of a profile."""
        # Arrange
        created = self.store.put("U1", "PROFILE#t0", {"name": "Ann", "email": "a@x"})
        self.clock.advance(1)

        # Act
        self.store.patch("U1", "PROFILE#t0", set_fields={"name": "Ann B"}, remove_fields=["email"])
        fetched = self.store.get("U1", "PROFILE#t0")

        # Assert
        self.assertEqual({"name": "Ann B"}, fetched.attributes)
        self.assertEqual(created.created_at, fetched.created_at)
        self.assertGreater(fetched.updated_at, fetched.created_at)
        self.assertEqual([fetched], self.store.query_by_partition("U1", "PROFILE"))

        self.assertTrue(self.store.delete("U1", "PROFILE#t0"))
        self.assertEqual([], self.store.scan())


if __name__ == "__main__":
    unittest.main()
