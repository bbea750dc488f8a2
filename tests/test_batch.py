from pathlib import Path

from tests.helpers import VALID_CARD, FakeOpenAI, make_image
from mtgid.batch import BatchIdentifier
from mtgid.client import CardIdentifier
from mtgid.models import MTGCard


class ScriptedIdentifier:
    """Returns a card for every image except those mapped to an exception."""

    def __init__(self, failures=None, retries=None):
        self.failures = failures or {}
        self.retries = retries or {}
        self.calls = []

    def identify(self, image_path, max_retries=3, on_retry=None):
        self.calls.append((Path(image_path).name, max_retries))
        for attempt in range(1, self.retries.get(Path(image_path).name, 0) + 1):
            on_retry(attempt, max_retries, 2 ** (attempt - 1))
        failure = self.failures.get(Path(image_path).name)
        if isinstance(failure, BaseException):
            raise failure
        if failure == "none":
            return None
        return MTGCard.model_validate(VALID_CARD)


def test_unexpected_error_is_contained(tmp_path):
    files = [tmp_path / name for name in ("1.jpg", "2.jpg", "3.jpg")]
    identifier = ScriptedIdentifier(failures={"2.jpg": RuntimeError("disk on fire")})
    batch = BatchIdentifier(identifier, sleep=lambda _: None)

    results = batch.run(files)

    assert [result.file_name for result in results] == ["1.jpg", "2.jpg", "3.jpg"]
    assert [result.identified for result in results] == [True, False, True]
    assert results[1].error == "disk on fire"
    assert len(identifier.calls) == 3


def test_pacing_delay_between_images_only(tmp_path):
    files = [tmp_path / name for name in ("1.jpg", "2.jpg", "3.jpg")]
    sleeps = []
    batch = BatchIdentifier(ScriptedIdentifier(), request_delay=1.0, sleep=sleeps.append)

    batch.run(files)

    assert sleeps == [1.0, 1.0]


def test_max_retries_passed_through(tmp_path):
    identifier = ScriptedIdentifier()
    batch = BatchIdentifier(identifier, max_retries=5, sleep=lambda _: None)

    batch.run([tmp_path / "1.jpg"])

    assert identifier.calls == [("1.jpg", 5)]


def test_status_callback_sequence(tmp_path):
    files = [tmp_path / name for name in ("1.jpg", "2.jpg", "3.jpg")]
    identifier = ScriptedIdentifier(
        failures={"2.jpg": "none", "3.jpg": ValueError("bad")},
        retries={"2.jpg": 2},
    )
    statuses = []
    batch = BatchIdentifier(identifier, sleep=lambda _: None)

    batch.run(files, on_status=lambda *args: statuses.append(args))

    assert statuses == [
        (0, "1.jpg", "Processing..."),
        (0, "1.jpg", "Success"),
        (1, "2.jpg", "Processing..."),
        (1, "2.jpg", "Retrying 1/3 (1s)..."),
        (1, "2.jpg", "Retrying 2/3 (2s)..."),
        (1, "2.jpg", "Failed"),
        (2, "3.jpg", "Processing..."),
        (2, "3.jpg", "Error"),
    ]


def test_discover_uses_configured_extensions(tmp_path):
    make_image(tmp_path / "a.png")
    make_image(tmp_path / "b.jpg")
    batch = BatchIdentifier(ScriptedIdentifier(), extensions=(".png",))

    assert [path.name for path in batch.discover(tmp_path)] == ["a.png"]


def test_end_to_end_with_fake_model(tmp_path):
    files = [make_image(tmp_path / f"{index}.jpg") for index in range(3)]
    fake = FakeOpenAI([VALID_CARD])
    identifier = CardIdentifier("test-model", client=fake, examples=(), sleep=lambda _: None)
    batch = BatchIdentifier(identifier, sleep=lambda _: None)

    results = batch.run(files)

    assert all(result.identified for result in results)
    assert len(fake.responses.calls) == 3
