"""Test hierarchy and output descriptors.

The hierarchy (solution -> projects -> test items) is owned by whoever
loads the workspace. The coordination layer only reads its structure and
writes one annotation per project: :attr:`TestProject.output`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, computed_field

from covctl.domain.observable import ObservableObject


class OutputDirectory(BaseModel):
    """One build/test artifact directory and its measured size."""

    model_config = {"frozen": True}

    path: str
    size: int = 0
    file_count: int = 0


class OutputDescriptor(BaseModel):
    """Artifacts produced for one project. Also the target of a clean."""

    model_config = {"frozen": True}

    project: str
    directories: tuple[OutputDirectory, ...] = Field(default_factory=tuple)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_size(self) -> int:
        return sum(d.size for d in self.directories)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def file_count(self) -> int:
        return sum(d.file_count for d in self.directories)


class TestItem(ObservableObject):
    """A node in the test hierarchy."""

    __test__ = False  # not a pytest test class
    kind = "item"

    def __init__(self, name: str, path: Path | None = None) -> None:
        super().__init__()
        self.name = name
        self.path = path
        self.parent: TestItem | None = None
        self._children: list[TestItem] = []

    @property
    def children(self) -> list[TestItem]:
        """Live child list. Callers iterating across awaits should copy it."""
        return self._children

    def add_child(self, child: TestItem) -> TestItem:
        child.parent = self
        self._children.append(child)
        self.notify_property_changed("children")
        return child

    def remove_child(self, child: TestItem) -> None:
        self._children.remove(child)
        child.parent = None
        self.notify_property_changed("children")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class TestProject(TestItem):
    """A project node; carries the output annotation."""

    kind = "project"

    def __init__(self, name: str, path: Path | None = None) -> None:
        super().__init__(name, path)
        self._output: OutputDescriptor | None = None

    @property
    def output(self) -> OutputDescriptor | None:
        return self._output

    @output.setter
    def output(self, value: OutputDescriptor | None) -> None:
        self._output = value
        self.notify_property_changed("output")


class TestSolution(TestItem):
    """Root of the hierarchy."""

    kind = "solution"

    @property
    def projects(self) -> list[TestProject]:
        return [c for c in self._children if isinstance(c, TestProject)]

    def find_project(self, name: str) -> TestProject | None:
        for project in self.projects:
            if project.name == name:
                return project
        return None
