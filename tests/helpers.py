"""
Shared fixtures for tests that need handler code on disk.
"""

import importlib
import os
import sys
import tempfile
import textwrap
import unittest

# Add the src directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mock_bootstrap import TaskRootFinder


EXAMPLES_TASK_ROOT = os.path.abspath(
    os.path.join(os.path.dirname(__file__), '..', 'examples', 'task_root')
)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TaskRootTestCase(unittest.TestCase):
    """Test case with a temporary task root and its own fallback finder."""

    task_root_path = None

    def setUp(self):
        """Set up test fixtures."""
        if self.task_root_path is None:
            self._tmp = tempfile.TemporaryDirectory()
            self.task_root = self._tmp.name
        else:
            self._tmp = None
            self.task_root = self.task_root_path
        self.finder = TaskRootFinder(self.task_root)
        self._modules_before = set(sys.modules)

    def tearDown(self):
        """Unregister the finder and forget modules loaded from the task root."""
        if self.finder in sys.meta_path:
            sys.meta_path.remove(self.finder)

        root = os.path.realpath(self.task_root)
        for name in set(sys.modules) - self._modules_before:
            module_file = getattr(sys.modules[name], "__file__", None)
            if module_file and os.path.realpath(module_file).startswith(root):
                del sys.modules[name]
        importlib.invalidate_caches()

        if self._tmp is not None:
            self._tmp.cleanup()

    def write_module(self, name: str, source: str) -> str:
        """Write ``<task_root>/<name>.py`` and return its path."""
        path = os.path.join(self.task_root, *name.split("/")) + ".py"
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(textwrap.dedent(source))
        importlib.invalidate_caches()
        return path
