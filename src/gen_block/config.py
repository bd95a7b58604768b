import os

from pydantic import BaseModel

DEFAULT_WRAP_PREFIX = "Effect.gen(function* ()"
DEFAULT_WRAP_SUFFIX = ")"

_TRUTHY = {"1", "true", "yes", "on"}


class TransformOptions(BaseModel):
    """How a file is rewritten and how its source map is labelled.

    ``wrap_prefix`` replaces the ``gen`` keyword and ``wrap_suffix`` follows the
    block's closing brace, so ``gen { ... }`` becomes
    ``Effect.gen(function* () { ... })`` by default.
    """

    source_name: str | None = None
    file: str | None = None
    include_content: bool = False
    wrap_blocks: bool = True
    wrap_prefix: str = DEFAULT_WRAP_PREFIX
    wrap_suffix: str = DEFAULT_WRAP_SUFFIX


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def load_options(**overrides: object) -> TransformOptions:
    """Build options from ``GEN_BLOCK_*`` environment variables, then apply non-``None`` ``overrides``."""
    values: dict[str, object] = {
        "include_content": _env_flag("GEN_BLOCK_INCLUDE_CONTENT", False),
        "wrap_blocks": _env_flag("GEN_BLOCK_WRAP_BLOCKS", True),
        "wrap_prefix": os.getenv("GEN_BLOCK_WRAP_PREFIX", DEFAULT_WRAP_PREFIX),
        "wrap_suffix": os.getenv("GEN_BLOCK_WRAP_SUFFIX", DEFAULT_WRAP_SUFFIX),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return TransformOptions.model_validate(values)
