import base64
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from errors import GenerationError
from models import Attachment
from services.llm_generator import (
    LLMGenerator,
    build_initial_prompt,
    build_revision_prompt,
    describe_attachment,
    strip_code_fence,
)


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestStripCodeFence:
    def test_removes_marker_and_closing_fence(self):
        assert strip_code_fence("```html\n<p>hi</p>\n```") == "<p>hi</p>"

    def test_interior_is_preserved(self):
        interior = "<div>\n  <pre>```js\nx()\n```</pre>\n</div>"
        assert strip_code_fence(f"```html\n{interior}\n```\n") == interior

    @pytest.mark.parametrize("text", [
        "<!DOCTYPE html><html></html>",
        " ```html\n<p>x</p>\n```",
        "```\n<p>x</p>\n```",
        "Here you go:\n```html\n<p>x</p>\n```",
    ])
    def test_unfenced_input_is_unchanged(self, text):
        assert strip_code_fence(text) == text


def test_describe_attachment_without_attachments():
    assert describe_attachment([]) == "No attachments."
    assert describe_attachment(None) == "No attachments."


def test_describe_attachment_decodes_first_data_uri():
    encoded = base64.b64encode(b"name,score\nada,10").decode()
    context = describe_attachment([
        Attachment(name="scores.csv", url=f"data:text/csv;base64,{encoded}"),
        Attachment(name="ignored.txt", url="data:text/plain;base64,aWdub3JlZA=="),
    ])
    assert "scores.csv" in context
    assert "name,score\nada,10" in context
    assert "ignored" not in context


def test_describe_attachment_references_remote_url():
    context = describe_attachment([Attachment(name="logo.png", url="https://cdn.example.com/logo.png")])
    assert "https://cdn.example.com/logo.png" in context


def test_describe_attachment_accepts_unpadded_base64():
    context = describe_attachment([Attachment(name="note.md", url="data:text/markdown;base64,aGk")])
    assert '"""\nhi\n"""' in context


def test_describe_attachment_summarizes_binary_payload():
    png = b"\x89PNG\r\n\x1a\n" + bytes(range(16))
    encoded = base64.b64encode(png).decode()
    context = describe_attachment([Attachment(name="captcha.png", url=f"data:image/png;base64,{encoded}")])
    assert "captcha.png" in context
    assert f"[Binary data, {len(png)} bytes]" in context


def test_describe_attachment_percent_decodes_plain_data_uri():
    context = describe_attachment([Attachment(name="greeting.txt", url="data:text/plain,hello%20world%21")])
    assert "hello world!" in context
    assert "%20" not in context


def test_describe_attachment_tolerates_undecodable_payload():
    context = describe_attachment([Attachment(name="bad.txt", url="data:text/plain;base64,a")])
    assert "bad.txt" in context
    assert "[Undecodable data]" in context


def test_initial_prompt_embeds_brief_checks_and_context():
    prompt = build_initial_prompt("Build a counter", ["#count exists", "button increments"], "No attachments.")
    assert "Build a counter" in prompt
    assert "#count exists\nbutton increments" in prompt
    assert "No attachments." in prompt
    assert "single `index.html`" in prompt


def test_revision_prompt_embeds_document_and_brief():
    html = "<html>\n<body>old</body>\n</html>"
    prompt = build_revision_prompt(html, "Add a reset button")
    assert html in prompt
    assert "Add a reset button" in prompt


def test_generate_returns_completion_text():
    client = MagicMock()
    client.chat.completions.create.return_value = completion("```html\n<p>x</p>\n```")
    generator = LLMGenerator(api_key="k", model="test-model", client=client)

    assert generator.generate("make a page") == "```html\n<p>x</p>\n```"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"] == [{"role": "user", "content": "make a page"}]


@pytest.mark.parametrize("content", ["", "   ", None])
def test_generate_rejects_empty_content(content):
    client = MagicMock()
    client.chat.completions.create.return_value = completion(content)
    with pytest.raises(GenerationError):
        LLMGenerator(api_key="k", client=client).generate("prompt")


def test_generate_wraps_client_errors():
    client = MagicMock()
    client.chat.completions.create.side_effect = OpenAIError("quota exceeded")
    with pytest.raises(GenerationError, match="quota exceeded"):
        LLMGenerator(api_key="k", client=client).generate("prompt")
