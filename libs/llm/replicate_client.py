from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import replicate
import yaml

from libs.core.settings import Settings, get_settings
from .contract import CLASSIFICATION_SCHEMA, TAG_VOCABULARY
from .llm_client import LLMClient

DEFAULT_PROMPTS_PATH = Path(__file__).resolve().parents[2] / "config" / "prompts.yaml"


class LLMClientError(Exception):
    """Raised when interaction with LLM fails."""


class ReplicateLLMClient(LLMClient):
    """LLM client powered by Replicate API."""

    def __init__(
        self,
        settings: Settings | None = None,
        prompts_path: str | Path | None = None,
        client: Optional[replicate.Client] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)

        # Fall back to defaults if a custom Settings class is used in tests
        self.model: str = str(getattr(self.settings, "llm_model", "openai/gpt-5-structured"))
        self._log_payloads: bool = bool(getattr(self.settings, "llm_log_payloads", False))
        self._max_output_tokens: int = int(getattr(self.settings, "llm_max_output_tokens", 1024))
        self.client = client or replicate.Client(
            api_token=getattr(self.settings, "replicate_api_token", "") or None
        )

        configured = prompts_path or getattr(self.settings, "prompts_path", None)
        self.prompts_path = Path(configured) if configured else DEFAULT_PROMPTS_PATH
        try:
            with self.prompts_path.open("r", encoding="utf-8") as fh:
                self.prompts: Dict[str, Dict[str, str]] = yaml.safe_load(fh) or {}
            self.logger.debug("Prompts loaded from: %s", str(self.prompts_path))
        except FileNotFoundError as exc:
            raise LLMClientError(f"Prompts file not found: {self.prompts_path}") from exc
        except yaml.YAMLError as exc:
            raise LLMClientError("Failed to parse prompts file") from exc

    def _prompt(self, section: str, key: str) -> str:
        try:
            return self.prompts[section][key]
        except (KeyError, TypeError) as exc:
            raise LLMClientError(
                f"Prompt '{section}.{key}' not found in {self.prompts_path}"
            ) from exc

    def _output_text(self, out: Any) -> str:
        """Normalise the different shapes ``replicate.run`` may return."""
        if out is None:
            return ""
        if isinstance(out, str):
            return out
        if isinstance(out, dict):
            # Structured models return 'json_output'; others a 'text' field
            if "json_output" in out:
                jo = out.get("json_output")
                return jo if isinstance(jo, str) else json.dumps(jo, ensure_ascii=False)
            if isinstance(out.get("text"), str):
                return out["text"]
            return json.dumps(out, ensure_ascii=False, default=str)
        # Many models stream an iterator of string chunks
        try:
            return "".join(str(chunk) for chunk in out)
        except TypeError as exc:
            raise LLMClientError("Unexpected output from Replicate") from exc

    def _call(self, instructions: str, user_text: str, schema: Dict[str, Any], name: str) -> str:
        """Run the structured model with a strict JSON schema response format."""
        input_payload: Dict[str, Any] = {
            "instructions": instructions,
            "input_item_list": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": user_text}],
                }
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": name, "strict": True, "schema": schema},
            },
            "max_output_tokens": self._max_output_tokens,
            "reasoning_effort": "minimal",
            "verbosity": "low",
        }
        lvl = logging.INFO if self._log_payloads else logging.DEBUG
        self.logger.log(
            lvl,
            "Replicate request | model=%s | input=%s",
            self.model,
            json.dumps(input_payload, ensure_ascii=False, default=str),
        )
        try:
            out = self.client.run(self.model, input=input_payload)
            # Streaming output keeps polling the backend while it is consumed
            text = self._output_text(out)
        except LLMClientError:
            raise
        except Exception as exc:
            # Network, auth, quota and model errors all surface here
            self.logger.exception("Replicate request failed: %s", exc)
            raise LLMClientError(f"Replicate request failed: {exc}") from exc

        self.logger.log(lvl, "Replicate response | model=%s | text=%s", self.model, text)
        return text

    def classify_note(self, text: str) -> str:
        instructions = self._prompt("classification", "system").format(
            vocabulary="、".join(TAG_VOCABULARY)
        )
        user_prompt = self._prompt("classification", "user").format(raw_text=text)
        return self._call(instructions, user_prompt, CLASSIFICATION_SCHEMA, "note_classification")


__all__ = ["LLMClientError", "ReplicateLLMClient"]
