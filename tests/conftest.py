import pytest

from vitrina.cart import CartStore, MemoryCartStorage
from vitrina.config import Settings
from vitrina.demo import seed_storefront


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def shop(settings):
    return seed_storefront(settings)


@pytest.fixture
def storage():
    return MemoryCartStorage()


@pytest.fixture
def store(storage, settings):
    return CartStore(storage, settings)
