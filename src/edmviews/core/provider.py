"""Model providers — where composite documents come from.

Two providers are bundled:

- ``FileModelProvider`` reads an ``.edmx`` file from disk.
- ``ModuleModelProvider`` imports a Python module (by dotted name or by
  ``.py`` path), looks for classes exposing ``to_edmx()`` whose name ends
  with the selector, and instantiates the first one that will construct.

Both raise ``ModelUnavailable`` with a readable reason on failure.
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Protocol

from .errors import ModelUnavailable
from .models import ModelSource

logger = logging.getLogger(__name__)

DEFAULT_SELECTOR = "Context"


class ModelProvider(Protocol):
    def get_model(self, locator: str, selector: Optional[str] = None) -> ModelSource:
        ...


# ---------------------------------------------------------------------------
# File provider
# ---------------------------------------------------------------------------

class FileModelProvider:
    """Reads the composite document verbatim from a file."""

    def get_model(self, locator: str, selector: Optional[str] = None) -> ModelSource:
        path = Path(locator).expanduser()
        if not path.is_file():
            raise ModelUnavailable(f"EDMX file '{locator}' not found.")
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ModelUnavailable(f"Error reading {locator}: {exc}") from exc

        logger.info("Read %d characters from %s", len(text), path)
        return ModelSource(name=path.stem, edmx=text, origin=str(path.resolve()))


# ---------------------------------------------------------------------------
# Module provider
# ---------------------------------------------------------------------------

class ModuleModelProvider:
    """Instantiates a model class found in a Python module.

    Parameters
    ----------
    init_kwargs
        Keyword arguments passed to each candidate's constructor, e.g. a
        ``connection_string``.  Empty by default.
    """

    def __init__(self, init_kwargs: dict[str, Any] | None = None) -> None:
        self.init_kwargs = dict(init_kwargs or {})

    def get_model(self, locator: str, selector: Optional[str] = None) -> ModelSource:
        module = self._load_module(locator)
        logger.info("Resolved module=%s", module.__name__)

        suffix = selector if selector is not None else DEFAULT_SELECTOR
        candidates = self.find_candidates(module, suffix)
        if not candidates:
            if suffix:
                raise ModelUnavailable(
                    f"No model class ending with '{suffix}' found in {locator}."
                )
            raise ModelUnavailable(f"No model class with to_edmx() found in {locator}.")

        for cls in candidates:
            instance = self._activate(cls)
            if instance is None:
                continue
            logger.info("Model type=%s.%s", cls.__module__, cls.__qualname__)
            return ModelSource(
                name=cls.__name__,
                edmx=self._write_edmx(instance, cls),
                origin=f"{cls.__module__}.{cls.__qualname__}",
            )

        raise ModelUnavailable("No model could be created.")

    @staticmethod
    def find_candidates(module: ModuleType, suffix: str) -> list[type]:
        """Classes defined in *module* with a callable ``to_edmx`` and a matching name."""
        found = []
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__:
                continue
            if inspect.isabstract(obj) or not callable(getattr(obj, "to_edmx", None)):
                continue
            full_name = f"{obj.__module__}.{obj.__qualname__}"
            if suffix and not full_name.endswith(suffix):
                continue
            found.append(obj)
        return found

    def _activate(self, cls: type) -> Any:
        try:
            return cls(**self.init_kwargs)
        except Exception as exc:
            logger.error("Unable to create instance of type %s: %s", cls.__qualname__, exc)
            return None

    @staticmethod
    def _write_edmx(instance: Any, cls: type) -> str:
        logger.info("Writing Edmx to string")
        try:
            text = instance.to_edmx()
        except Exception as exc:
            raise ModelUnavailable(f"Unable to write EDMX: {exc}") from exc
        if not isinstance(text, str):
            raise ModelUnavailable(
                f"{cls.__qualname__}.to_edmx() returned {type(text).__name__}, expected str"
            )
        logger.info("Wrote %d characters", len(text))
        return text

    @staticmethod
    def _load_module(locator: str) -> ModuleType:
        if locator.endswith(".py") or Path(locator).suffix == ".py":
            path = Path(locator).expanduser()
            if not path.is_file():
                raise ModelUnavailable(
                    f"Module '{locator}' not found.  If this module contains a "
                    f"model, be sure it exists first."
                )
            module_name = f"_edmviews_model_{path.stem}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ModelUnavailable(f"Cannot load module from {locator}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            try:
                spec.loader.exec_module(module)
            except Exception as exc:
                sys.modules.pop(module_name, None)
                raise ModelUnavailable(f"Error loading {locator}: {exc}") from exc
            return module

        try:
            return importlib.import_module(locator)
        except Exception as exc:
            raise ModelUnavailable(f"Error loading {locator}: {exc}") from exc


def get_provider(kind: str, **kwargs: Any) -> ModelProvider:
    """Return a provider by name: ``file`` or ``module``."""
    kind = kind.lower()
    if kind == "file":
        return FileModelProvider()
    if kind == "module":
        return ModuleModelProvider(**kwargs)
    raise ValueError(f"Unknown model source '{kind}'. Use 'file' or 'module'.")
