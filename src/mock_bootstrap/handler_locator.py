"""
Handler resolution for the Mock Lambda Bootstrap

This module turns a handler identifier such as ``module::Class::method`` or
``module::function`` into a callable loaded from the task root, and wires
the task root into the import system as a fallback search location.
"""

import importlib
import importlib.abc
import importlib.machinery
import inspect
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import IO, Any, Callable, Dict, Optional

from .function_interface import HandlerResolutionError, LambdaFunction


DELIMITER = "::"

logger = logging.getLogger(__name__)


class TaskRootFinder(importlib.abc.MetaPathFinder):
    """
    Fallback finder that searches ``<task_root>/<name>`` for top-level modules.

    It sits at the end of ``sys.meta_path``, so it only sees names the
    default search could not find.
    """

    def __init__(self, task_root: str):
        self.task_root = str(task_root)

    def find_spec(self, fullname, path=None, target=None):
        # Submodules are found through their parent package's __path__.
        if path is not None:
            return None
        spec = importlib.machinery.PathFinder.find_spec(fullname, [self.task_root])
        if spec is not None:
            logger.debug("Resolved %s from task root %s", fullname, self.task_root)
        return spec

    def register(self) -> "TaskRootFinder":
        if self not in sys.meta_path:
            sys.meta_path.append(self)
        return self

    def __repr__(self):
        return f"TaskRootFinder({self.task_root!r})"


_default_finder: Optional[TaskRootFinder] = None


def default_finder(task_root: str) -> TaskRootFinder:
    """
    Register the process-wide task root finder.

    Only the first call registers; later calls return the same finder.
    """
    global _default_finder
    if _default_finder is None:
        _default_finder = TaskRootFinder(task_root).register()
    elif _default_finder.task_root != str(task_root):
        logger.warning("Task root finder already registered for %s, ignoring %s",
                       _default_finder.task_root, task_root)
    return _default_finder


@dataclass(frozen=True)
class HandlerReference:
    """
    A handler entry point.

    Attributes:
        module_name: Importable module holding the handler
        type_name: Dotted class path within the module, if any
        method_name: Function or method to call
        entry_point: The resolved callable (None until resolved)
    """
    module_name: str
    type_name: Optional[str]
    method_name: str
    entry_point: Optional[Callable[..., Any]] = field(default=None, compare=False, repr=False)

    @property
    def identifier(self) -> str:
        parts = [self.module_name, self.type_name, self.method_name]
        return DELIMITER.join(p for p in parts if p)

    def invoke(self, input_stream: IO[bytes], output_stream: IO[bytes], context: Any) -> None:
        """
        Call the entry point with the decoded event and write its result.

        ``bytes`` results are written unchanged, anything else as JSON.
        """
        if self.entry_point is None:
            raise HandlerResolutionError(f"Handler '{self.identifier}' has not been resolved")

        raw = input_stream.read()
        event = json.loads(raw) if raw.strip() else None
        result = self.entry_point(event, context)

        if isinstance(result, (bytes, bytearray)):
            output_stream.write(bytes(result))
        else:
            output_stream.write(json.dumps(result, default=str).encode("utf-8"))


def parse_handler(identifier: str) -> HandlerReference:
    """
    Split a handler identifier into its parts.

    Accepts ``module::type::method``, ``module::function`` and the
    ``module.function`` form used by Python runtimes.

    Raises:
        HandlerResolutionError: If the identifier is empty or malformed
    """
    identifier = (identifier or "").strip()
    if not identifier:
        raise HandlerResolutionError("No handler specified")

    if DELIMITER in identifier:
        parts = identifier.split(DELIMITER)
        if len(parts) > 3 or not all(p.strip() for p in parts):
            raise HandlerResolutionError(
                f"Invalid handler '{identifier}': expected 'module::type::method' or 'module::function'"
            )
        parts = [p.strip() for p in parts]
        if len(parts) == 3:
            module_name, type_name, method_name = parts
        else:
            module_name, method_name = parts
            type_name = None
    elif "." in identifier:
        module_name, method_name = identifier.rsplit(".", 1)
        type_name = None
        if not module_name or not method_name:
            raise HandlerResolutionError(f"Invalid handler '{identifier}'")
    else:
        raise HandlerResolutionError(
            f"Invalid handler '{identifier}': expected 'module::type::method' or 'module::function'"
        )

    return HandlerReference(module_name.replace("/", "."), type_name, method_name)


class HandlerLocator:
    """Loads handler entry points from a task root."""

    def __init__(self, task_root: str, finder: Optional[TaskRootFinder] = None):
        """
        Initialize the locator.

        Args:
            task_root: Directory holding the function code and its dependencies
            finder: Fallback finder to register (defaults to the process-wide one)
        """
        self.task_root = str(task_root)
        self.finder = finder.register() if finder is not None else default_finder(self.task_root)
        self._instances: Dict[type, Any] = {}

    def resolve(self, identifier: str) -> HandlerReference:
        """
        Resolve a handler identifier to a callable entry point.

        Raises:
            HandlerResolutionError: If the module, type or method cannot be loaded
        """
        reference = parse_handler(identifier)
        module = self._load_module(reference.module_name)

        target: Any = module
        if reference.type_name:
            for part in reference.type_name.split("."):
                target = self._get_attribute(target, part, reference)

        if inspect.isclass(target):
            entry_point = self._bind_method(target, reference.method_name, reference)
        else:
            candidate = self._get_attribute(target, reference.method_name, reference)
            if inspect.isclass(candidate) and issubclass(candidate, LambdaFunction):
                entry_point = self._bind_method(candidate, "handle", reference)
            else:
                entry_point = candidate

        if not callable(entry_point):
            raise HandlerResolutionError(f"Handler '{reference.identifier}' is not callable")

        logger.debug("Resolved handler %s to %r", reference.identifier, entry_point)
        return HandlerReference(reference.module_name, reference.type_name,
                                reference.method_name, entry_point)

    def _load_module(self, module_name: str):
        try:
            return importlib.import_module(module_name)
        except ImportError as e:
            raise HandlerResolutionError(
                f"Unable to import module '{module_name}' from {self.task_root}: {e}"
            ) from e
        except (Exception, SystemExit) as e:
            raise HandlerResolutionError(
                f"Error loading module '{module_name}': {e.__class__.__name__}: {e}"
            ) from e

    def _get_attribute(self, owner: Any, name: str, reference: HandlerReference) -> Any:
        try:
            return getattr(owner, name)
        except AttributeError as e:
            raise HandlerResolutionError(
                f"Handler '{reference.identifier}' is missing '{name}'"
            ) from e

    def _bind_method(self, cls: type, name: str, reference: HandlerReference) -> Any:
        """Return ``cls.name``, bound to an instance unless it is static or a classmethod."""
        try:
            raw = inspect.getattr_static(cls, name)
        except AttributeError as e:
            raise HandlerResolutionError(
                f"Handler '{reference.identifier}' is missing '{name}'"
            ) from e

        if isinstance(raw, (staticmethod, classmethod)):
            return getattr(cls, name)
        return getattr(self._instance_of(cls, reference), name)

    def _instance_of(self, cls: type, reference: HandlerReference) -> Any:
        if cls not in self._instances:
            try:
                self._instances[cls] = cls()
            except (Exception, SystemExit) as e:
                raise HandlerResolutionError(
                    f"Unable to create an instance of '{cls.__qualname__}' for handler "
                    f"'{reference.identifier}': {e}"
                ) from e
        return self._instances[cls]
