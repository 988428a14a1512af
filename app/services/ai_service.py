"""Code generation with the Anthropic Messages API.

The service turns a natural language description into a single self-contained
HTML/React app. Model output that cannot be parsed into a valid artifact is
replaced by a placeholder app, so ``generate`` always returns something that
can be stored and deployed.
"""
import html
import json
import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from anthropic import AsyncAnthropic
from pydantic import ValidationError as SchemaValidationError

from ..config import settings
from ..schemas.artifact import CodeFile, GeneratedCode

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert web developer. Your task is to generate complete, production-ready web applications based on user descriptions.

CRITICAL INSTRUCTIONS:
1. Generate a SINGLE, SELF-CONTAINED HTML file that includes all necessary code
2. Use inline CSS (within <style> tags) and inline JavaScript (within <script> tags)
3. Use React with CDN imports (DO NOT use npm or build tools)
4. Use Tailwind CSS via CDN
5. The app must be fully functional and ready to run by opening the HTML file
6. Include all necessary dependencies via CDN
7. Use modern, clean UI design with Tailwind CSS
8. Make the app responsive and mobile-friendly
9. Add helpful comments in the code

RESPONSE FORMAT:
Return ONLY a JSON object with this exact structure:
{
  "files": [
    {
      "path": "index.html",
      "content": "<!DOCTYPE html>...",
      "language": "html"
    }
  ],
  "dependencies": {},
  "framework": "react"
}

DO NOT include any markdown formatting, explanations, or text outside the JSON.
The entire response must be valid JSON."""

USER_PROMPT_TEMPLATE = """Generate a web application for: {prompt}

Remember to:
- Create ONE self-contained HTML file
- Include React via CDN (https://unpkg.com/react@18/umd/react.production.min.js and https://unpkg.com/react-dom@18/umd/react-dom.production.min.js)
- Include Babel standalone for JSX (https://unpkg.com/@babel/standalone/babel.min.js)
- Include Tailwind CSS via CDN (https://cdn.tailwindcss.com)
- Make it responsive, beautiful and functional
- Return ONLY the JSON response as specified"""

FALLBACK_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Generated App</title>
  <script crossorigin src="https://unpkg.com/react@18/umd/react.production.min.js"></script>
  <script crossorigin src="https://unpkg.com/react-dom@18/umd/react-dom.production.min.js"></script>
  <script src="https://unpkg.com/@babel/standalone/babel.min.js"></script>
  <script src="https://cdn.tailwindcss.com"></script>
</head>
<body>
  <div id="root"></div>

  <script type="text/babel">
    function App() {
      return (
        <div className="min-h-screen bg-gradient-to-br from-blue-50 to-indigo-100 flex items-center justify-center p-4">
          <div className="bg-white rounded-lg shadow-xl p-8 max-w-2xl w-full">
            <h1 className="text-3xl font-bold text-gray-900 mb-4">
              Your App: __PROMPT__
            </h1>
            <p className="text-gray-600 mb-6">
              This is a starter template for your app. The AI will generate a more sophisticated version.
            </p>
            <div className="bg-blue-50 border border-blue-200 rounded-lg p-4">
              <p className="text-blue-800 text-sm">
                <strong>Note:</strong> This is a placeholder. Try regenerating your app for a better result.
              </p>
            </div>
          </div>
        </div>
      );
    }

    ReactDOM.createRoot(document.getElementById('root')).render(<App />);
  </script>
</body>
</html>"""

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


@dataclass(frozen=True)
class Parsed:
    code: GeneratedCode


@dataclass(frozen=True)
class Malformed:
    raw: str
    reason: str


ParseResult = Union[Parsed, Malformed]


def strip_code_fence(text: str) -> str:
    """Remove a markdown code fence wrapped around the whole response."""
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _loads_lenient(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Prose around the object: retry on the outermost braces
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise
        return json.loads(text[start:end + 1])


def parse_generation_response(text: str) -> ParseResult:
    if not text or not text.strip():
        return Malformed(raw=text or "", reason="empty response")

    try:
        data = _loads_lenient(strip_code_fence(text))
    except json.JSONDecodeError as e:
        return Malformed(raw=text, reason=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return Malformed(raw=text, reason="response is not a JSON object")

    try:
        code = GeneratedCode.model_validate(data)
    except SchemaValidationError as e:
        return Malformed(raw=text, reason=f"unexpected structure: {e.error_count()} errors")

    if not validate_generated_code(code):
        return Malformed(raw=text, reason="missing or incomplete files")

    return Parsed(code=code)


def normalize_generation(result: ParseResult, prompt: str) -> GeneratedCode:
    """Collapse a parse result into an artifact that is always valid."""
    if isinstance(result, Parsed):
        logger.info("Successfully generated app with %d files", len(result.code.files))
        return result.code

    logger.error("Failed to parse AI response (%s). Response text: %s", result.reason, result.raw)
    return create_fallback_app(prompt)


def _escape_for_jsx(text: str) -> str:
    # JSX treats braces as expressions, so they are escaped like markup
    return html.escape(text, quote=True).replace("{", "&#123;").replace("}", "&#125;")


def create_fallback_app(prompt: str) -> GeneratedCode:
    """Placeholder app that echoes the prompt and asks the user to retry"""
    content = FALLBACK_TEMPLATE.replace("__PROMPT__", _escape_for_jsx(prompt))
    return GeneratedCode(
        files=[CodeFile(path="index.html", content=content, language="html")],
        dependencies={},
        framework="react",
    )


def extract_project_name(prompt: str) -> str:
    """Build a display name from the first five words of the prompt"""
    words = prompt.split()[:5]
    name = " ".join(word[:1].upper() + word[1:] for word in words)
    return name[:47] + "..." if len(name) > 50 else name


def validate_generated_code(code: Optional[GeneratedCode]) -> bool:
    if code is None or not code.files:
        return False

    for file in code.files:
        if not file.path or not file.content or not file.language:
            return False

    return True


class CodeGenerationService:
    def __init__(self, client: Optional[AsyncAnthropic] = None):
        self.model = settings.ANTHROPIC_MODEL
        self.max_tokens = settings.AI_MAX_TOKENS
        self.temperature = settings.AI_TEMPERATURE
        self._client = client

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        return self._client

    async def _request(self, prompt: str) -> str:
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=SYSTEM_PROMPT,
            messages=[
                {"role": "user", "content": USER_PROMPT_TEMPLATE.format(prompt=prompt)}
            ],
        )
        return "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )

    async def generate(self, prompt: str) -> GeneratedCode:
        """Generate an app for the prompt. Never raises."""
        logger.info("Generating app with prompt: %s", prompt)

        try:
            response_text = await self._request(prompt)
        except Exception:
            logger.exception("Error generating app")
            return create_fallback_app(prompt)

        logger.debug("Raw AI response: %s...", response_text[:200])
        return normalize_generation(parse_generation_response(response_text), prompt)
