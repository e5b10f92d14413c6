import asyncio

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from gridfs.errors import NoFile
from mongomock_motor import AsyncMongoMockClient

from placement_api.core.security import create_access_token
from placement_api.main import create_app
from placement_api.models.user import Role


class FakeGridOut:
    """Download stream over in-memory bytes."""

    def __init__(self, data: bytes, chunk_size: int = 4):
        self._data = data
        self._chunk_size = chunk_size
        self._offset = 0
        self.closed = False

    def close(self):
        self.closed = True

    async def readchunk(self) -> bytes:
        chunk = self._data[self._offset:self._offset + self._chunk_size]
        self._offset += len(chunk)
        return chunk


class FakeBucket:
    """In-memory stand-in for the GridFS bucket."""

    def __init__(self):
        self.files = {}
        self.opened = []
        self.delete_error = None

    async def upload_from_stream(self, filename, source, metadata=None):
        file_id = ObjectId()
        self.files[file_id] = {"filename": filename, "data": bytes(source), "metadata": metadata}
        return file_id

    async def open_download_stream(self, file_id):
        if file_id not in self.files:
            raise NoFile(f"no file in gridfs collection with _id {file_id!r}")
        grid_out = FakeGridOut(self.files[file_id]["data"])
        self.opened.append(grid_out)
        return grid_out

    async def delete(self, file_id):
        if self.delete_error is not None:
            raise self.delete_error
        if file_id not in self.files:
            raise NoFile(f"no file could be deleted because none matched {file_id!r}")
        del self.files[file_id]


class FakeStore:
    def __init__(self):
        self.users = AsyncMongoMockClient()["placement_test"]["users"]
        self.avatars = FakeBucket()

    async def ping(self) -> bool:
        return True


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def insert_users(store):
    """Inserts user documents and returns their ids."""
    def _insert(*docs):
        result = asyncio.run(store.users.insert_many(list(docs)))
        return result.inserted_ids
    return _insert


@pytest.fixture
def find_user(store):
    def _find(user_id):
        return asyncio.run(store.users.find_one({"_id": user_id}))
    return _find


def auth_headers(user_id, role=Role.STUDENT):
    token = create_access_token(str(user_id), role)
    return {"Authorization": f"Bearer {token}"}


def make_student(name, counsellor=None, **extra):
    doc = {
        "name": name,
        "email": f"{name.lower()}@example.com",
        "role": "student",
        "password": "hashed",
        "profile": {"gender": "female", "batch": "2024"},
        "certificates": [],
        "resume": [],
    }
    if counsellor is not None:
        doc["profile"]["counsellor"] = counsellor
    doc.update(extra)
    return doc
