"""Shared fixtures: a temporary working directory and fake collaborators.

The fakes stand in for Ghostscript, OCRmyPDF, pdftotext and the
classification API. "PDFs" here are small text files; a line starting with
TEXT: plays the part of an embedded text layer.
"""

import io
import os
import shutil
import tempfile

import httpx
import pytest
from openai import OpenAI
from rich.console import Console

from ocrrename import OcrRename
from models import Classifier, base_url_from_endpoint
from storage import LocalDriver, Stage
from tools import ToolFailure
from workflows import PipelineContext, TitleLedger, LEDGER_FILENAME


TEXT_MARKER = "TEXT:"

API_ENDPOINT = "https://api.test/v1/chat/completions"


@pytest.fixture(autouse=True)
def quiet_console():
    """Capture console output instead of printing it."""
    buffer = io.StringIO()
    OcrRename.set_console(Console(file=buffer, width=200))
    yield buffer
    OcrRename.set_console(Console(highlight=False))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    dir_path = tempfile.mkdtemp(prefix="ocrrename_test_")
    yield dir_path
    # Cleanup
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def driver(temp_dir):
    """LocalDriver with all stage directories created."""
    return LocalDriver(temp_dir)


@pytest.fixture
def ledger(driver):
    return TitleLedger(os.path.join(driver.root_path, LEDGER_FILENAME))


def write_pdf(driver, stage, name, text=None):
    """Write a fake PDF into a stage directory and return its path."""
    path = driver.path(stage, name)
    with open(path, "w", encoding="utf-8") as f:
        f.write("%PDF-1.4 fake\n")
        if text is not None:
            f.write(f"{TEXT_MARKER}{text}\n")
    return path


def read_text_layer(path):
    with open(path, encoding="utf-8") as f:
        lines = [line[len(TEXT_MARKER):].strip() for line in f if line.startswith(TEXT_MARKER)]
    return "\n".join(lines)


class FakeCleaner:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def clean(self, input_path, output_path):
        self.calls.append((input_path, output_path))
        if self.fail:
            raise ToolFailure("ghostscript", input_path)
        shutil.copyfile(input_path, output_path)
        return output_path


class FakeProbe:
    def __init__(self):
        self.calls = []

    def has_text(self, pdf_path):
        self.calls.append(pdf_path)
        return bool(read_text_layer(pdf_path))


class FakeOcrEngine:
    """Adds a text layer reading 'OCR <original text>'."""

    def __init__(self, recognized="OCR text", fail=False):
        self.recognized = recognized
        self.fail = fail
        self.calls = []

    def ocr(self, input_path, output_path, force=False):
        self.calls.append((input_path, output_path, force))
        if self.fail:
            raise ToolFailure("ocrmypdf", input_path)
        shutil.copyfile(input_path, output_path)
        with open(output_path, "a", encoding="utf-8") as f:
            f.write(f"{TEXT_MARKER}{self.recognized}\n")
        return output_path


class FakeExtractor:
    def __init__(self):
        self.calls = []

    def extract(self, pdf_path):
        self.calls.append(pdf_path)
        if not os.path.exists(pdf_path):
            raise ToolFailure("pdftotext", pdf_path)
        return read_text_layer(pdf_path)


class FakeClassifier(Classifier):
    """Returns queued titles in order, or derives one from the text."""

    def __init__(self, titles=None, on_classify=None):
        self.titles = list(titles or [])
        self.on_classify = on_classify
        self.texts = []

    @property
    def name(self):
        return "fake"

    def classify(self, text):
        self.texts.append(text)
        if self.on_classify:
            self.on_classify(text)
        if self.titles:
            return self.titles.pop(0)
        return self._clean_title(text.splitlines()[0] if text else None)


@pytest.fixture
def fakes():
    """Namespace of fake tool classes."""
    class Fakes:
        Cleaner = FakeCleaner
        Probe = FakeProbe
        OcrEngine = FakeOcrEngine
        Extractor = FakeExtractor
        Classifier = FakeClassifier
        write_pdf = staticmethod(write_pdf)
    return Fakes


@pytest.fixture
def make_context(driver, ledger):
    """Build a PipelineContext from fakes, overriding any of them."""
    def _make(**overrides):
        parts = dict(
            driver=driver,
            cleaner=FakeCleaner(),
            probe=FakeProbe(),
            ocr_engine=FakeOcrEngine(),
            extractor=FakeExtractor(),
            classifier=FakeClassifier(),
            ledger=ledger,
        )
        parts.update(overrides)
        return PipelineContext(**parts)
    return _make


@pytest.fixture
def intake_pdf(driver):
    """Write a fake PDF into in/ (or force-processing/ with forced=True)."""
    def _write(name, text=None, forced=False):
        return write_pdf(driver, Stage.intake_for(forced), name, text)
    return _write


def chat_completion(content):
    """A 200 chat-completion response carrying content."""
    return httpx.Response(200, json={
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        }],
    })


def rate_limited():
    return httpx.Response(429, json={"error": {"message": "Rate limit reached", "type": "requests"}})


@pytest.fixture
def api_client():
    """Real OpenAI client whose HTTP responses are replayed from a script.

    Returns a function taking httpx.Response objects and returning
    (client, requests), requests being every httpx.Request sent.
    """
    clients = []

    def _make(*responses):
        script = list(responses)
        requests = []

        def handler(request):
            requests.append(request)
            return script.pop(0)

        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(http_client)
        client = OpenAI(
            base_url=base_url_from_endpoint(API_ENDPOINT),
            api_key="test-key",
            max_retries=0,
            http_client=http_client,
        )
        return client, requests

    yield _make
    for http_client in clients:
        http_client.close()


@pytest.fixture
def api_responses():
    """Namespace of canned HTTP responses for api_client."""
    class Responses:
        completion = staticmethod(chat_completion)
        rate_limited = staticmethod(rate_limited)
        invalid_json = staticmethod(lambda: httpx.Response(
            200, content=b"not json at all", headers={"content-type": "application/json"},
        ))
        html = staticmethod(lambda: httpx.Response(
            200, content=b"<html>Bad Gateway</html>", headers={"content-type": "text/html"},
        ))
    return Responses
