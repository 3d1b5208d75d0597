from typing import Literal

from pydantic import BaseModel


class EnvConfig(BaseModel):
    """A single environment setting a client or component needs at construction.

    Attributes:
        env_key (str): Key suffix, prefixed by the owner (e.g. "BASE_URL" becomes "LLM_OPENAI_BASE_URL").
        val_type (str): How the raw value is parsed: "string", "number", "bool" or "list".
        default: Fallback when unset. None marks the setting as required.
    """

    env_key: str
    val_type: Literal["string", "number", "bool", "list"] = "string"
    default: str | int | float | bool | list | None = None
