import pytest

from src.config import Settings


class MaxRandom:
    """Always draws the last index of the range."""

    def __init__(self):
        self.calls = 0

    def randint(self, a, b):
        self.calls += 1
        return b


class SequenceRandom:
    """Draws indices from a fixed sequence, repeating the final one."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randint(self, a, b):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        assert a <= value <= b
        return value


@pytest.fixture
def site(tmp_path) -> Settings:
    """A base directory with a small public tree and an asset manifest."""
    public = tmp_path / "public"
    (public / "img").mkdir(parents=True)
    (public / "index.html").write_text("<h1>home</h1>")
    (public / "img" / "a.png").write_bytes(b"A-PNG")
    (public / "img" / "b.png").write_bytes(b"B-PNG")
    (public / "notes.txt").write_text("notes")
    (public / "LICENSE").write_text("no extension")
    (tmp_path / ".glitch-assets").write_text(
        "\n".join([
            '{"name": "x.jpg", "url": "https://cdn.example/x.jpg"}',
            "not json",
            '{"name": "y.jpg", "url": "https://cdn.example/y.jpg"}',
            '{"uuid": "abc", "deleted": true}',
        ])
    )
    return Settings(base_dir=str(tmp_path))
