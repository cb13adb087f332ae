"""Sample model module for ``edmviews refresh examples/blogging_models.py``."""

from pathlib import Path

_EDMX = Path(__file__).with_name("blogging.edmx")


class BloggingContext:
    """Serves the bundled blogging document."""

    def __init__(self, connection_string=None):
        self.connection_string = connection_string

    def to_edmx(self):
        return _EDMX.read_text(encoding="utf-8")


class BrokenContext:
    """Cannot be constructed; the provider skips it."""

    def __init__(self):
        raise RuntimeError("no database configured")

    def to_edmx(self):
        return ""
