"""
Encoding and hashing tools: Base64 encode/decode and text digests.
"""

import base64
import hashlib
from typing import Any, Dict

from cortex_plugins.tools.base import Tool, to_json

HASH_ALGORITHMS = ["md5", "sha1", "sha256", "sha512"]


class Base64EncodeTool(Tool):
    """Encode UTF-8 text to Base64."""

    tool_name = "base64_encode"

    def __init__(self) -> None:
        super().__init__(
            name=self.tool_name,
            description="Encode text to Base64 format",
            parameters={
                "type": "object",
                "properties": {
                    "text": {"type": "string", "description": "Text to encode in Base64"},
                },
                "required": ["text"],
            },
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Base64EncodeTool":
        return cls()

    async def run(self, tool_input: Dict[str, Any]) -> str:
        try:
            text = (tool_input or {})["text"]
            encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc)})
        return to_json({"success": True, "original": text, "encoded": encoded, "length": len(encoded)})


class Base64DecodeTool(Tool):
    """Decode Base64 back to UTF-8 text. Bad padding or non-UTF-8 output fails."""

    tool_name = "base64_decode"

    def __init__(self) -> None:
        super().__init__(
            name=self.tool_name,
            description="Decode Base64 encoded text back to original format",
            parameters={
                "type": "object",
                "properties": {
                    "encoded_text": {"type": "string", "description": "Base64 encoded text to decode"},
                },
                "required": ["encoded_text"],
            },
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Base64DecodeTool":
        return cls()

    async def run(self, tool_input: Dict[str, Any]) -> str:
        try:
            encoded_text = (tool_input or {})["encoded_text"]
            decoded = base64.b64decode(encoded_text).decode("utf-8")
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc)})
        return to_json(
            {"success": True, "encoded": encoded_text, "decoded": decoded, "length": len(decoded)}
        )


class HashTextTool(Tool):
    """
    Hash text with MD5, SHA-1, SHA-256 or SHA-512.

    Tool input schema:
    {
        "text": "hello",
        "algorithm": "sha256"
    }
    """

    tool_name = "hash_text"

    def __init__(self) -> None:
        super().__init__(
            name=self.tool_name,
            description=(
                "Generate cryptographic hash of text using various algorithms "
                "(MD5, SHA1, SHA256, SHA512)"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "text": {"type": "string", "description": "Text to hash"},
                    "algorithm": {
                        "type": "string",
                        "enum": HASH_ALGORITHMS,
                        "description": "Hashing algorithm to use (default: sha256)",
                    },
                },
                "required": ["text"],
            },
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "HashTextTool":
        return cls()

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        algorithm = (tool_input.get("algorithm") or "sha256").lower()
        try:
            text = tool_input["text"]
            if algorithm not in HASH_ALGORITHMS:
                raise ValueError(f"Unsupported hash algorithm: {algorithm}")
            digest = hashlib.new(algorithm, text.encode("utf-8")).hexdigest()
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc)})
        return to_json(
            {
                "success": True,
                "original": text,
                "algorithm": algorithm,
                "hash": digest,
                "length": len(digest),
            }
        )
