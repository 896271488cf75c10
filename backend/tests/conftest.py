"""
Test configuration and fixtures
"""

import pytest
from unittest.mock import MagicMock

from pymongo.errors import AutoReconnect, BulkWriteError

from practice_availability.models.availability import DayOfWeek, DayTemplate, TimeSlot


# Mock database
class MockCollection:
    """Mock MongoDB collection"""

    def __init__(self):
        self.data = {}
        self.counter = 0

    async def find_one(self, query: dict, *args, **kwargs):
        for doc in self.data.values():
            if self._match(doc, query):
                return dict(doc)
        return None

    def find(self, query: dict = None, *args, **kwargs):
        results = []
        for doc in self.data.values():
            if query is None or self._match(doc, query):
                results.append(dict(doc))
        return MockCursor(results)

    async def insert_one(self, doc: dict):
        self.counter += 1
        doc_id = doc.get("_id") or f"mock_id_{self.counter}"
        doc["_id"] = doc_id
        self.data[doc_id] = dict(doc)
        return MagicMock(inserted_id=doc_id)

    async def insert_many(self, docs: list, ordered: bool = True, **kwargs):
        ids = []
        for doc in docs:
            result = await self.insert_one(doc)
            ids.append(result.inserted_id)
        return MagicMock(inserted_ids=ids)

    async def update_one(self, query: dict, update: dict, *args, **kwargs):
        for doc_id, doc in self.data.items():
            if self._match(doc, query):
                if "$set" in update:
                    doc.update(update["$set"])
                return MagicMock(modified_count=1, matched_count=1)
        return MagicMock(modified_count=0, matched_count=0)

    async def replace_one(self, query: dict, replacement: dict, upsert: bool = False, **kwargs):
        for doc_id, doc in self.data.items():
            if self._match(doc, query):
                self.data[doc_id] = {**replacement, "_id": doc_id}
                return MagicMock(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            result = await self.insert_one(dict(replacement))
            return MagicMock(matched_count=0, modified_count=0, upserted_id=result.inserted_id)
        return MagicMock(matched_count=0, modified_count=0, upserted_id=None)

    async def delete_one(self, query: dict):
        for doc_id, doc in list(self.data.items()):
            if self._match(doc, query):
                del self.data[doc_id]
                return MagicMock(deleted_count=1)
        return MagicMock(deleted_count=0)

    async def delete_many(self, query: dict):
        removed = 0
        for doc_id, doc in list(self.data.items()):
            if self._match(doc, query):
                del self.data[doc_id]
                removed += 1
        return MagicMock(deleted_count=removed)

    async def count_documents(self, query: dict = None):
        if query is None:
            return len(self.data)
        return sum(1 for doc in self.data.values() if self._match(doc, query))

    async def create_index(self, *args, **kwargs):
        return "mock_index"

    def _match(self, doc: dict, query: dict) -> bool:
        for key, value in query.items():
            if key.startswith("$"):
                continue
            if key not in doc:
                return False
            elif isinstance(value, dict):
                # Handle operators
                for op, op_val in value.items():
                    if op == "$ne" and doc[key] == op_val:
                        return False
                    elif op == "$eq" and doc[key] != op_val:
                        return False
                    elif op == "$in" and doc[key] not in op_val:
                        return False
                    elif op == "$lt" and not doc[key] < op_val:
                        return False
                    elif op == "$lte" and not doc[key] <= op_val:
                        return False
                    elif op == "$gt" and not doc[key] > op_val:
                        return False
                    elif op == "$gte" and not doc[key] >= op_val:
                        return False
            elif doc[key] != value:
                return False
        return True


class FailingInsertCollection(MockCollection):
    """Collection whose insert_many writes `fail_after` documents, then raises"""

    def __init__(self, fail_after: int):
        super().__init__()
        self.fail_after = fail_after

    async def insert_many(self, docs: list, ordered: bool = True, **kwargs):
        for doc in docs[:self.fail_after]:
            await self.insert_one(doc)
        raise BulkWriteError({"writeErrors": [{"index": self.fail_after, "code": 11000}]})


class FailingRollbackCollection(FailingInsertCollection):
    """Partial insert_many whose cleanup delete_many also fails"""

    def __init__(self, fail_after: int):
        super().__init__(fail_after)
        self.delete_attempts = 0

    async def delete_many(self, query: dict):
        self.delete_attempts += 1
        raise AutoReconnect("connection lost")


class FailingUpdateCollection(MockCollection):
    """Collection that accepts inserts but fails every update_one"""

    async def update_one(self, query: dict, update: dict, *args, **kwargs):
        raise AutoReconnect("connection lost")


class MockCursor:
    """Mock MongoDB cursor"""

    def __init__(self, data: list):
        self._data = data
        self._skip = 0
        self._limit = None

    def skip(self, n: int):
        self._skip = n
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def sort(self, key: str, direction: int = 1):
        self._data.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        return self

    async def to_list(self, length: int = None):
        data = self._data[self._skip:]
        if self._limit:
            data = data[:self._limit]
        if length:
            data = data[:length]
        return data


class MockDatabase:
    """Mock MongoDB database"""

    def __init__(self):
        self._collections = {}

    def __getattr__(self, name: str):
        if name.startswith("_"):
            return super().__getattribute__(name)
        if name not in self._collections:
            self._collections[name] = MockCollection()
        return self._collections[name]

    def set_collection(self, name: str, collection: MockCollection) -> None:
        self._collections[name] = collection


@pytest.fixture
def mock_db():
    """Create a mock database"""
    return MockDatabase()


@pytest.fixture
def org_id():
    return "org_test123"


@pytest.fixture
def user_id():
    return "user_test123"


@pytest.fixture
def weekday_template():
    """Mon-Fri 09:00-17:00 with a 12:00-13:00 lunch gap on Monday"""
    days = [
        DayTemplate(
            day_of_week=DayOfWeek.MONDAY,
            slots=[
                TimeSlot(start_time="09:00", end_time="12:00"),
                TimeSlot(start_time="13:00", end_time="17:00"),
            ]
        )
    ]
    for day in (DayOfWeek.TUESDAY, DayOfWeek.WEDNESDAY, DayOfWeek.THURSDAY, DayOfWeek.FRIDAY):
        days.append(DayTemplate(
            day_of_week=day,
            slots=[TimeSlot(start_time="09:00", end_time="17:00")]
        ))
    return days

