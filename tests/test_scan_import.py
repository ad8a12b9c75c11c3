import base64
import io
import json
from types import SimpleNamespace

import pytest
from PIL import Image

from invoice_maker.core.services import scan_import
from invoice_maker.errors import ScanImportError


class StubExtractor:
    def __init__(self, answer="[]", error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    def extract(self, image_base64, prompt):
        self.calls.append((image_base64, prompt))
        if self.error is not None:
            raise self.error
        return self.answer


def test_strip_data_url():
    assert scan_import.strip_data_url("data:image/png;base64,QUJD") == "QUJD"
    assert scan_import.strip_data_url("QUJD") == "QUJD"


def test_parse_items_applies_defaults():
    text = json.dumps(
        [
            {"description": "Kopi", "quantity": 2, "price": 25000},
            {"description": "Roti", "price": 15000},
            {"description": "Gratis", "quantity": 0},
            "noise",
        ]
    )
    items = scan_import.parse_extracted_items(text)

    assert [(i.description, i.quantity, i.unit_price) for i in items] == [
        ("Kopi", 2, 25000),
        ("Roti", 1, 15000),
        ("Gratis", 1, 0),
    ]
    assert len({i.id for i in items}) == 3


def test_parse_blank_answer():
    assert scan_import.parse_extracted_items("  ") == []


@pytest.mark.parametrize("text", ["not json", '{"description": "x"}', '[{"quantity": "many"}]'])
def test_parse_invalid_answer(text):
    with pytest.raises(ScanImportError):
        scan_import.parse_extracted_items(text)


def test_scan_bytes_are_sent_as_base64():
    extractor = StubExtractor(answer='[{"description": "Teh", "quantity": 1, "price": 8000}]')

    items = scan_import.scan_invoice_image(b"\x89PNG", extractor)

    assert extractor.calls == [(base64.b64encode(b"\x89PNG").decode("ascii"), scan_import.SCAN_PROMPT)]
    assert items[0].description == "Teh"


def test_scan_data_url_header_is_removed():
    extractor = StubExtractor()
    scan_import.scan_invoice_image("data:image/jpeg;base64,QUJD", extractor)
    assert extractor.calls[0][0] == "QUJD"


def test_extractor_failure_becomes_scan_error():
    extractor = StubExtractor(error=ConnectionError("offline"))
    with pytest.raises(ScanImportError, match="offline"):
        scan_import.scan_invoice_image(b"img", extractor)


def test_parse_items_wrapped_in_object():
    items = scan_import.parse_extracted_items('{"items": [{"description": "Gula", "quantity": 3, "price": 14000}]}')
    assert [(i.description, i.quantity, i.unit_price) for i in items] == [("Gula", 3, 14000)]


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_client(content):
    completions = FakeCompletions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), "white").save(buffer, format="PNG")
    return buffer.getvalue()


def test_vision_extractor_sends_image_and_parses_answer():
    client, completions = _fake_client('{"items": [{"description": "Beras 5kg", "quantity": 2, "price": 68000}]}')
    extractor = scan_import.OpenAIVisionExtractor(client, model="vision-test")
    png = _png_bytes()

    items = scan_import.scan_invoice_image(png, extractor)

    assert [(i.description, i.quantity, i.unit_price) for i in items] == [("Beras 5kg", 2, 68000)]
    assert completions.kwargs["model"] == "vision-test"
    assert completions.kwargs["response_format"] == {"type": "json_object"}
    text_part, image_part = completions.kwargs["messages"][0]["content"]
    assert text_part == {"type": "text", "text": scan_import.SCAN_PROMPT}
    assert image_part["image_url"]["url"] == "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def test_vision_extractor_empty_answer_gives_no_items():
    client, _ = _fake_client(None)
    assert scan_import.scan_invoice_image(_png_bytes(), scan_import.OpenAIVisionExtractor(client)) == []


def test_extractor_from_settings_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ScanImportError, match="OPENAI_API_KEY"):
        scan_import.extractor_from_settings({})


def test_extractor_from_settings_uses_configured_model():
    client, _ = _fake_client("[]")
    extractor = scan_import.extractor_from_settings({"scan": {"model": "gpt-4o"}}, client=client)
    assert extractor.client is client
    assert extractor.model == "gpt-4o"


def test_extractor_from_settings_builds_client_from_environment(monkeypatch):
    monkeypatch.setenv("RECEIPT_KEY", "sk-test")
    extractor = scan_import.extractor_from_settings(
        {"scan": {"api_key_env": "RECEIPT_KEY", "base_url": "http://localhost:1234/v1"}}
    )
    assert extractor.model == scan_import.DEFAULT_SCAN_SETTINGS["model"]
    assert str(extractor.client.base_url).startswith("http://localhost:1234/v1")
