"""
stepin.config - Configuration loader

This module handles parsing and loading the optional stepin.edn file and
the environment variables that override it. StepinConfig holds every
setting that changes how step-in behaves.

The stepin.edn file uses the reader's map syntax:
    {:read-eval true              ; true | false | :unknown
     :speculative-eval true       ; allow resolving a symbol by evaluating it
     :skip-identity-bindings true ; drop (x x) pairs from flattened lets
     :source-paths ["src"]
     :debug false
     :log-file "stepin.log"}

Environment variables:
    STEPIN_PATH       extra source roots, separated by os.pathsep
    STEPIN_DEBUG      "1"/"true" turns on debug logging to stderr
    STEPIN_READ_EVAL  true, false or unknown
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional

from stepin.compiler.reader import read_str
from stepin.runtime.types import Keyword, MapLiteral, VectorLiteral

CONFIG_FILENAME = "stepin.edn"
READ_EVAL_VALUES = (True, False, "unknown")


def form_to_python(value: Any) -> Any:
    """Keywords become their names, vectors lists and maps dicts, recursively."""
    if isinstance(value, Keyword):
        return value.name
    elif isinstance(value, VectorLiteral):
        return [form_to_python(item) for item in value.items]
    elif isinstance(value, MapLiteral):
        return {form_to_python(k): form_to_python(v) for k, v in value.pairs}
    elif isinstance(value, list):
        return [form_to_python(item) for item in value]
    else:
        return value


def find_config_file(start_path: Optional[str] = None) -> Optional[str]:
    """
    The nearest stepin.edn in start_path (a file or directory, default the
    working directory) or one of its parents, or None.
    """
    if start_path is None:
        current = os.getcwd()
    elif os.path.isfile(start_path):
        current = os.path.dirname(os.path.abspath(start_path))
    else:
        current = os.path.abspath(start_path)

    while True:
        candidate = os.path.join(current, CONFIG_FILENAME)
        if os.path.isfile(candidate):
            return candidate

        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _parse_bool(text: str) -> bool:
    return text.strip().lower() in ("1", "true", "yes", "on")


def _parse_read_eval(value: Any, where: str):
    if isinstance(value, str):
        lowered = value.strip().lstrip(":").lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        value = lowered
    if value not in READ_EVAL_VALUES:
        raise ValueError(f"{where}: :read-eval must be true, false or :unknown, got {value!r}")
    return value


@dataclass
class StepinConfig:
    """
    Settings for the interpreter and the step-in tooling.

    Fields:
        read_eval: True, False or "unknown", like *read-eval*
        speculative_eval: let the resolver evaluate symbols it cannot find
        skip_identity_bindings: omit (x x) pairs when flattening calls
        source_paths: extra directories searched for namespaces
        debug: log diagnostics to stderr
        log_file: file diagnostics are appended to
        config_file: the stepin.edn the settings came from, if any
    """

    read_eval: Any = True
    speculative_eval: bool = False
    skip_identity_bindings: bool = True
    source_paths: list[str] = field(default_factory=list)
    debug: bool = False
    log_file: Optional[str] = None
    config_file: Optional[str] = None

    # every key of the file, including ones this class does not know
    _raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def get_absolute_source_paths(self) -> list[str]:
        """Source paths resolved against the directory of stepin.edn."""
        base = os.path.dirname(self.config_file) if self.config_file else os.getcwd()
        return [os.path.join(base, p) for p in self.source_paths]

    @classmethod
    def from_file(cls, path: str) -> "StepinConfig":
        """
        Load a StepinConfig from a stepin.edn file.

        Raises:
            ValueError: If the file is invalid or holds values of the wrong type.
        """
        with open(path, encoding="utf-8") as f:
            content = f.read()

        try:
            parsed = read_str(content)
        except Exception as e:
            raise ValueError(f"Failed to parse {path}: {e}") from e

        config_form = next((form for form in parsed if isinstance(form, MapLiteral)), None)
        if config_form is None:
            raise ValueError(f"{path} must contain a map as the main form")
        config_dict = form_to_python(config_form)

        source_paths = config_dict.get("source-paths", [])
        if not isinstance(source_paths, list):
            raise ValueError(
                f":source-paths must be a vector, got {type(source_paths).__name__}"
            )
        log_file = config_dict.get("log-file")
        if log_file is not None and not isinstance(log_file, str):
            raise ValueError(f":log-file must be a string, got {type(log_file).__name__}")
        for key in ("speculative-eval", "skip-identity-bindings", "debug"):
            if key in config_dict and not isinstance(config_dict[key], bool):
                raise ValueError(f":{key} must be true or false, got {config_dict[key]!r}")

        return cls(
            read_eval=_parse_read_eval(config_dict.get("read-eval", True), path),
            speculative_eval=config_dict.get("speculative-eval", False),
            skip_identity_bindings=config_dict.get("skip-identity-bindings", True),
            source_paths=source_paths,
            debug=config_dict.get("debug", False),
            log_file=log_file,
            config_file=os.path.abspath(path),
            _raw=config_dict,
        )

    def apply_environment(self, environ=None) -> "StepinConfig":
        """Override settings from STEPIN_* environment variables."""
        environ = os.environ if environ is None else environ
        if environ.get("STEPIN_DEBUG"):
            self.debug = _parse_bool(environ["STEPIN_DEBUG"])
        if environ.get("STEPIN_READ_EVAL"):
            self.read_eval = _parse_read_eval(environ["STEPIN_READ_EVAL"], "STEPIN_READ_EVAL")
        if environ.get("STEPIN_PATH"):
            for p in environ["STEPIN_PATH"].split(os.pathsep):
                p = p.strip()
                if p and p not in self.source_paths:
                    self.source_paths.append(p)
        return self

    @classmethod
    def load(cls, path: Optional[str] = None, environ=None) -> "StepinConfig":
        """
        Load the configuration.

        Args:
            path: Path to a stepin.edn file, or None to search from the current
                  directory upward. Without a file the defaults are used.
            environ: Mapping to read overrides from, defaults to os.environ.
        """
        if path is None:
            path = find_config_file()
        elif os.path.isdir(path):
            path = find_config_file(path)
        elif not os.path.isfile(path):
            raise FileNotFoundError(f"Path does not exist: {path}")

        config = cls.from_file(path) if path else cls()
        return config.apply_environment(environ)


__all__ = [
    "CONFIG_FILENAME",
    "StepinConfig",
    "find_config_file",
    "form_to_python",
]
