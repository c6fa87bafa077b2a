"""LLM-powered HTML generator using an OpenAI-compatible API."""
import logging
import base64
import binascii
from openai import OpenAI, OpenAIError
from typing import List, Optional
from urllib.parse import unquote_to_bytes
from errors import GenerationError
from models import Attachment

logger = logging.getLogger(__name__)

FENCE_MARKER = "```html"
FENCE_CLOSE = "```"
NO_ATTACHMENTS = "No attachments."
TEXT_TYPES = ("text", "json", "csv", "xml", "javascript")


def strip_code_fence(text: str) -> str:
    """Remove a wrapping ```html ... ``` fence.

    Only a response that begins with the literal marker is touched; anything
    else is returned unchanged.
    """
    if not text.startswith(FENCE_MARKER):
        return text
    body = text[len(FENCE_MARKER):].rstrip()
    if body.endswith(FENCE_CLOSE):
        body = body[:-len(FENCE_CLOSE)]
    return body.strip()


def _decode_data_uri(url: str):
    """Split a data URI into its content type and payload bytes."""
    header, _, encoded = url.partition(",")
    content_type = header[len("data:"):].split(";")[0] or "text/plain"
    if ";base64" in header:
        # Padding is often dropped by callers
        encoded = encoded.strip()
        data = base64.b64decode(encoded + "=" * (-len(encoded) % 4))
    else:
        data = unquote_to_bytes(encoded)
    return content_type, data


def describe_attachment(attachments: Optional[List[Attachment]]) -> str:
    """Prompt context for the first attachment; the rest are ignored."""
    if not attachments:
        return NO_ATTACHMENTS

    first = attachments[0]
    if len(attachments) > 1:
        logger.info(f"Using attachment {first.name}; ignoring {len(attachments) - 1} more")

    if not first.url.startswith("data:"):
        return (
            f"The project uses an attachment named '{first.name}', "
            f"available at {first.url}"
        )

    try:
        content_type, data = _decode_data_uri(first.url)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Could not decode {first.name}: {e}")
        return f"The project uses an attachment named '{first.name}'. [Undecodable data]"

    if not any(t in content_type for t in TEXT_TYPES):
        return (
            f"The project uses an attachment named '{first.name}' ({content_type}). "
            f"[Binary data, {len(data)} bytes]"
        )

    text = data.decode("utf-8", errors="ignore")
    return (
        f"The project uses an attachment named '{first.name}'. Its content is:\n"
        f'"""\n{text}\n"""'
    )


def build_initial_prompt(brief: str, checks: List[str], attachment_context: str) -> str:
    """Prompt for a fresh single-file application."""
    checks_text = "\n".join(checks)
    return f"""You are an expert front-end web developer specializing in creating clean, efficient, and self-contained HTML files.
## TASK
Your task is to create a single, self-contained `index.html` file based on the user's brief.
## CONSTRAINTS
1. You MUST generate a single `index.html` file.
2. All CSS and JavaScript code MUST be embedded directly within the HTML file using `<style>` and `<script>` tags.
3. Do not use any external file paths. External libraries from CDNs are allowed if requested.
## INPUT & CONTEXT
**Brief:**
\"\"\"
{brief}
\"\"\"
**Attachments:**
{attachment_context}
**Evaluation Checks:**
The code will be evaluated against these checks:
\"\"\"
{checks_text}
\"\"\"
## OUTPUT
Provide ONLY the complete HTML code for the `index.html` file, enclosed in a single markdown code block."""


def build_revision_prompt(existing_html: str, brief: str) -> str:
    """Prompt for adding a feature to an existing document."""
    return f"""You are an expert front-end web developer who is excellent at modifying existing code to add new features.
## TASK
Your task is to modify the provided HTML code to implement a new feature described in the brief.
## CONSTRAINTS
1. You MUST return the complete, updated code for the single `index.html` file.
2. All new CSS and JavaScript code must also be embedded directly within the HTML file.
3. Ensure the original functionality still works correctly alongside the new feature.
## INPUT & CONTEXT
**Original Code:**
This is the existing `index.html` file that you need to modify:
```html
{existing_html}
```
**New Brief for Revision:**
\"\"\"
{brief}
\"\"\"
## OUTPUT
Provide ONLY the complete, updated HTML code for the `index.html` file, enclosed in a single markdown code block."""


class LLMGenerator:
    """Generate HTML documents using LLM assistance."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        client=None
    ):
        """Initialize OpenAI-compatible client.

        ``base_url`` lets the same client talk to any OpenAI-compatible proxy.
        """
        self.model = model

        if client is not None:
            self.client = client
        elif base_url:
            logger.info(f"Using custom base_url: {base_url}")
            self.client = OpenAI(api_key=api_key, base_url=base_url)
        else:
            logger.info("Using standard OpenAI endpoint")
            self.client = OpenAI(api_key=api_key)

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the raw completion text."""
        logger.info(f"Calling {self.model} ({len(prompt)} prompt chars)...")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            raise GenerationError(f"Generation request failed: {e}") from e

        if not response.choices:
            raise GenerationError("Generation service returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise GenerationError("Generation service returned empty content")

        logger.info(f"Received {len(content)} chars of generated code")
        return content
