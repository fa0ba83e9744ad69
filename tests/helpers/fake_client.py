class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """Stands in for requests.Session; records requested URLs."""

    def __init__(self, responses=None, exc=None):
        self.responses = list(responses or [])
        self.exc = exc
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.responses.pop(0)

    def close(self):
        self.closed = True


class FakeImageClient:
    """Stands in for KmoniImageClient.

    ``frames`` maps a timestamp to image bytes or to an exception to raise.
    Timestamps without an entry get ``default``.
    """

    def __init__(self, frames=None, default=None):
        self.frames = dict(frames or {})
        self.default = default
        self.calls = []

    def fetch(self, timestamp, data_kind="jma", include_subsurface=False):
        self.calls.append((timestamp, data_kind, include_subsurface))
        item = self.frames.get(timestamp, self.default)
        if isinstance(item, Exception):
            raise item
        return item
