import io
import sys
import threading
from pathlib import Path
from typing import List, Optional, Tuple

import pytest
from PIL import Image

# Add src to sys.path so we can import quiz_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())


class FakePageProvider:
    """In-memory PageProvider: native text per page, PNG renders on demand."""

    def __init__(self, texts: List[str], render_error: Optional[Exception] = None):
        self.texts = list(texts)
        self.render_error = render_error
        self.rendered: List[Tuple[int, float]] = []
        self._lock = threading.Lock()

    @property
    def page_count(self) -> int:
        return len(self.texts)

    def extract_native_text(self, page_number: int) -> str:
        return self.texts[page_number - 1]

    def render_page_to_image(self, page_number: int, scale: float) -> bytes:
        with self._lock:
            self.rendered.append((page_number, scale))
        if self.render_error is not None:
            raise self.render_error
        image = Image.new("RGB", (40, 20), color="white")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()


class FakeRecognizer:
    """Recognizer returning canned output and recording its lifecycle."""

    def __init__(self, text: str = "", confidence: float = 0.9,
                 error: Optional[Exception] = None):
        self.text = text
        self.confidence = confidence
        self.error = error
        self.calls: List[str] = []
        self.closed = False

    def recognize_text(self, image: bytes, language_profile: str) -> Tuple[str, float]:
        self.calls.append(language_profile)
        if self.error is not None:
            raise self.error
        return self.text, self.confidence

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced clock for registry TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# Common test fixtures
@pytest.fixture
def fake_pages():
    """Factory for in-memory page providers."""
    return FakePageProvider


@pytest.fixture
def recognizer_factory():
    """
    Factory producing FakeRecognizers; created instances are recorded.

    Usage: make = recognizer_factory(text="...", confidence=0.8)
    """
    def build(**kwargs):
        created: List[FakeRecognizer] = []

        def make() -> FakeRecognizer:
            recognizer = FakeRecognizer(**kwargs)
            created.append(recognizer)
            return recognizer

        make.created = created
        return make

    return build


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sample_question_text() -> str:
    """Two Japanese questions with kana choices."""
    return (
        "令和5年度 試験問題\n"
        "問1 次のうち、感染症の予防に最も適切なものを1つ選べ。\n"
        "ア. 手洗いを徹底する\n"
        "イ. 換気をしない\n"
        "ウ. 睡眠を減らす\n"
        "エ. 水分を控える\n"
        "オ. 運動をやめる\n"
        "問2 血圧の正常値について正しいものはどれか。\n"
        "ア. 収縮期血圧 200 mmHg\n"
        "イ. 収縮期血圧 120 mmHg\n"
        "ウ. 拡張期血圧 150 mmHg\n"
    )
