import pytest

from tests.helpers import make_image


@pytest.fixture
def card_image(tmp_path):
    return make_image(tmp_path / "card.jpg")


@pytest.fixture
def sleeps():
    return []
