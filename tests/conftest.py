import base64
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("IOID_CONTRACT_ADDR", "0x1fcb980eD4334c2d0Be5aB1E9fD31Cb8f5d2eFE7")
os.environ.setdefault("IOID_REGISTRY_CONTRACT_ADDR", "0x04e4655Cf258EC802D17c23ec6112Ef7d97Fa2aF")

import pytest
from eth_account import Account
from eth_keys import keys
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from web3 import Web3

from pebble_ingest.core.deps import get_db, get_oracle
from pebble_ingest.core.errors import OracleDataError
from pebble_ingest.core.security import canonical_json
from pebble_ingest.db.base import Base
from pebble_ingest.main import app
from pebble_ingest.models import app as app_model, device, device_record  # noqa: F401
from pebble_ingest.proto.pebble import BinPackage
from pebble_ingest.services.oracle import OwnershipOracle
from pebble_ingest.services.record_store import RecordStore

DEVICE_ID = "did:io:0x5a8B3e2C4D1F6a7b8C9d0E1f2A3b4C5d6E7f8A9b"


class FakeOracle(OwnershipOracle):
    """In-memory ioID registry that records every call."""

    def __init__(self):
        self.tokens = {}
        self.owners = {}
        self.calls = []
        self.error = None

    def register(self, device_address, token_id, owner):
        self.tokens[device_address.lower()] = token_id
        self.owners[token_id] = owner

    def token_for_device(self, device_address):
        self.calls.append(("token_for_device", device_address))
        if self.error is not None:
            raise self.error
        return self.tokens.get(device_address.lower(), 0)

    def owner_of(self, token_id):
        self.calls.append(("owner_of", token_id))
        if token_id not in self.owners:
            raise OracleDataError("failed to query device owner", cause=ValueError("invalid token ID"))
        return self.owners[token_id]


class Signer:
    def __init__(self):
        self.account = Account.create()
        self.address = self.account.address

    def sign(self, fields):
        digest = Web3.keccak(canonical_json(fields))
        signature = keys.PrivateKey(bytes(self.account.key)).sign_msg_hash(bytes(digest))
        return "0x" + signature.to_bytes().hex()

    def query_body(self, device_id):
        fields = {"deviceID": device_id}
        return {**fields, "signature": self.sign(fields)}

    def telemetry_body(self, device_id, raw_envelope):
        fields = {"deviceID": device_id, "payload": encode_payload(raw_envelope)}
        return {**fields, "signature": self.sign(fields)}


def encode_payload(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def envelope(package_type, message, timestamp=1700000000, signature=b"\x01\x02\x03"):
    return BinPackage(
        type=package_type,
        timestamp=timestamp,
        data=message.SerializeToString(),
        signature=signature,
    ).SerializeToString()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return RecordStore(db)


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def owner():
    return Signer()


@pytest.fixture
def stranger():
    return Signer()


@pytest.fixture
def client(session_factory, oracle):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_oracle] = lambda: oracle
    yield TestClient(app)
    app.dependency_overrides.clear()
