# podpicker/transcripts/config.py
"""Pipeline configuration, validated with pydantic and passed explicitly to every fetcher."""

from __future__ import annotations

import os
from typing import Dict, Literal, Mapping, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel, Field, field_validator


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

ThirdPartyProvider = Literal["rapidapi", "custom", "assemblyai"]


class ProxyConfig(BaseModel):
    """Outbound HTTP proxy. Threaded through requests, never written to the environment."""

    host: str = Field(..., min_length=1, description="Proxy hostname")
    port: int = Field(..., ge=1, le=65535, description="Proxy port")
    username: Optional[str] = Field(default=None, description="Proxy auth user")
    password: Optional[str] = Field(default=None, description="Proxy auth password")

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @property
    def url(self) -> str:
        credentials = ""
        if self.username and self.password:
            credentials = f"{quote(self.username, safe='')}:{quote(self.password, safe='')}@"
        return f"http://{credentials}{self.host}:{self.port}"

    def as_requests_proxies(self) -> Dict[str, str]:
        return {"http": self.url, "https": self.url}


class ThirdPartyConfig(BaseModel):
    """Settings for the external transcript service used as the last strategy."""

    provider: ThirdPartyProvider = Field(default="rapidapi", description="Which external service to call")
    rapidapi_key: Optional[str] = Field(default=None, description="RapidAPI key")
    rapidapi_host: str = Field(
        default="youtube-transcript-api.p.rapidapi.com",
        description="RapidAPI host header and base domain",
    )
    custom_api_url: Optional[str] = Field(default=None, description="Custom transcript endpoint (POST)")
    custom_api_key: Optional[str] = Field(default=None, description="Bearer token for the custom endpoint")
    assemblyai_api_key: Optional[str] = Field(default=None, description="AssemblyAI API key")
    poll_interval_seconds: float = Field(default=5.0, ge=0, le=60, description="AssemblyAI polling interval")
    max_poll_attempts: int = Field(default=60, ge=1, le=1000, description="AssemblyAI polling budget")

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }


class PipelineConfig(BaseModel):
    """Root configuration for one transcript extraction."""

    timeout_seconds: float = Field(default=30.0, gt=0, le=300, description="Per-request HTTP timeout")
    languages: Tuple[str, ...] = Field(
        default=("en", "en-US", "en-GB"),
        min_length=1,
        description="Caption language preference, best first",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    proxy: Optional[ProxyConfig] = None
    third_party: ThirdPartyConfig = Field(default_factory=ThirdPartyConfig)

    model_config = {
        "frozen": True,
    }

    @field_validator("languages")
    @classmethod
    def strip_languages(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        cleaned = tuple(code.strip() for code in v if code and code.strip())
        if not cleaned:
            raise ValueError("At least one language code is required")
        return cleaned

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """
        Build configuration from environment variables.

        Missing variables never raise: no proxy unless both host and port are
        set, and third-party credentials stay None so that strategy reports
        itself as not configured instead of crashing.

        Raises:
            ValidationError: If a variable is present but malformed (e.g. a non-numeric port)
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            value = env.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        proxy = None
        proxy_host, proxy_port = read("YOUTUBE_PROXY_HOST"), read("YOUTUBE_PROXY_PORT")
        if proxy_host and proxy_port:
            proxy = ProxyConfig(
                host=proxy_host,
                port=proxy_port,
                username=read("YOUTUBE_PROXY_USERNAME"),
                password=read("YOUTUBE_PROXY_PASSWORD"),
            )

        third_party: Dict[str, object] = {
            "rapidapi_key": read("RAPIDAPI_KEY"),
            "custom_api_url": read("CUSTOM_TRANSCRIPT_API_URL"),
            "custom_api_key": read("CUSTOM_TRANSCRIPT_API_KEY"),
            "assemblyai_api_key": read("ASSEMBLYAI_API_KEY"),
        }
        if read("TRANSCRIPT_SERVICE"):
            third_party["provider"] = read("TRANSCRIPT_SERVICE").lower()

        settings: Dict[str, object] = {
            "proxy": proxy,
            "third_party": ThirdPartyConfig(**third_party),
        }
        if read("PODPICKER_HTTP_TIMEOUT"):
            settings["timeout_seconds"] = read("PODPICKER_HTTP_TIMEOUT")
        if read("PODPICKER_LANGUAGES"):
            settings["languages"] = tuple(read("PODPICKER_LANGUAGES").split(","))

        return cls(**settings)
