"""TOML configuration loader for the receipt module."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_OCR_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"

# Whole-word matches on a text line skip it. Payment-method words such as
# "card" are left out: they also name real items ("Gift card").
DEFAULT_SKIP_KEYWORDS: list[str] = [
    "subtotal", "sub total", "total", "grand total", "tax", "pajak", "ppn",
    "service charge", "servis", "change", "kembali", "cash", "tunai",
    "discount", "diskon", "balance", "payment", "bayar",
]


@dataclass
class OCRConfig:
    enabled: bool = True
    api_key: str = ""
    endpoint: str = DEFAULT_OCR_ENDPOINT
    timeout: float = 30.0


@dataclass
class OpenAIConfig:
    api_key: str = ""
    model: str = "gpt-4o"


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class InterpreterConfig:
    backend: str = "openai"
    max_tokens: int = 1000
    temperature: float = 0.1
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)


@dataclass
class ParserConfig:
    thousands_separator: str = "."
    decimal_separator: str = ","
    skip_keywords: list[str] = field(
        default_factory=lambda: list(DEFAULT_SKIP_KEYWORDS)
    )


@dataclass
class SummaryConfig:
    currency: str = "Rp"


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class ReceiptConfig:
    ocr: OCRConfig = field(default_factory=OCRConfig)
    interpreter: InterpreterConfig = field(default_factory=InterpreterConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(path: str | Path | None = None) -> ReceiptConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.

    Raises:
        ValueError: If the parser separators are empty or identical.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ocr = raw.get("ocr", {})
    itp = raw.get("interpreter", {})
    prs = raw.get("parser", {})
    smr = raw.get("summary", {})
    srv = raw.get("server", {})

    openai_cfg = itp.get("openai", {})
    claude_cfg = itp.get("claude", {})
    gemini_cfg = itp.get("gemini", {})

    # Resolve API keys: config file → environment variable
    ocr_api_key = ocr.get("api_key", "") or os.environ.get(
        "GOOGLE_VISION_API_KEY", ""
    )
    openai_api_key = openai_cfg.get("api_key", "") or os.environ.get(
        "OPENAI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )

    parser = ParserConfig(
        thousands_separator=prs.get("thousands_separator", "."),
        decimal_separator=prs.get("decimal_separator", ","),
        skip_keywords=prs.get("skip_keywords", list(DEFAULT_SKIP_KEYWORDS)),
    )
    if (
        not parser.thousands_separator
        or not parser.decimal_separator
        or parser.thousands_separator == parser.decimal_separator
    ):
        raise ValueError(
            "parser.thousands_separator and parser.decimal_separator "
            "must be two different non-empty marks"
        )

    return ReceiptConfig(
        ocr=OCRConfig(
            enabled=ocr.get("enabled", True),
            api_key=ocr_api_key,
            endpoint=ocr.get("endpoint", DEFAULT_OCR_ENDPOINT),
            timeout=ocr.get("timeout", 30.0),
        ),
        interpreter=InterpreterConfig(
            backend=itp.get("backend", "openai"),
            max_tokens=itp.get("max_tokens", 1000),
            temperature=itp.get("temperature", 0.1),
            openai=OpenAIConfig(
                api_key=openai_api_key,
                model=openai_cfg.get("model", "gpt-4o"),
            ),
            claude=ClaudeConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
        ),
        parser=parser,
        summary=SummaryConfig(
            currency=smr.get("currency", "Rp"),
        ),
        server=ServerConfig(
            host=srv.get("host", "127.0.0.1"),
            port=srv.get("port", 8000),
        ),
    )
