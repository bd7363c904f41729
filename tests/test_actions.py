"""Tests for ActionResolver lookup order and resource loading."""

from pathlib import Path

import pytest

from ingest.errors import StepActionError
from ingest.models import Step
from ingest.steps import ActionResolver


def _resource(tmp_path: Path, name: str = "forms.py") -> Path:
    path = tmp_path / name
    path.write_text(
        "LOADS = []\n"
        "LOADS.append(1)\n"
        "NOT_CALLABLE = 3\n"
        "def build(context, state):\n"
        "    return 'from resource'\n",
        encoding="utf-8",
    )
    return path


class TestResolve:
    def test_registered_callable_wins(self, tmp_path: Path) -> None:
        _resource(tmp_path)
        resolver = ActionResolver(tmp_path)
        resolver.register("build", lambda context, state: "registered")
        step = Step(id="a", action_reference="build", required_resource="forms.py")
        assert resolver.resolve(step)(None, None) == "registered"

    def test_module_attribute_reference(self) -> None:
        step = Step(id="a", action_reference="os.path:join")
        resolver = ActionResolver()
        assert resolver.resolve(step)("a", "b") == str(Path("a") / "b")

    def test_resource_attribute(self, tmp_path: Path) -> None:
        _resource(tmp_path)
        step = Step(id="a", action_reference="build", required_resource="forms.py")
        assert ActionResolver(tmp_path).resolve(step)(None, None) == "from resource"

    def test_absolute_resource_path(self, tmp_path: Path) -> None:
        path = _resource(tmp_path)
        step = Step(id="a", action_reference="build", required_resource=str(path))
        assert ActionResolver().resolve(step)(None, None) == "from resource"

    def test_resource_loaded_once(self, tmp_path: Path) -> None:
        _resource(tmp_path)
        resolver = ActionResolver(tmp_path)
        first = resolver.load_resource("forms.py")
        assert resolver.load_resource("forms.py") is first
        assert first.LOADS == [1]

    def test_dotted_resource(self) -> None:
        resolver = ActionResolver()
        assert resolver.load_resource("json").__name__ == "json"

    @pytest.mark.parametrize(
        ("reference", "resource"),
        [
            ("nowhere", None),
            ("missing_module_xyz:fn", None),
            ("os.path:no_such_function", None),
            ("NOT_CALLABLE", "forms.py"),
            ("absent", "forms.py"),
            ("build", "missing.py"),
            ("build", "no_such_package_xyz"),
        ],
    )
    def test_unresolvable(self, tmp_path: Path, reference: str, resource: str | None) -> None:
        _resource(tmp_path)
        step = Step(id="a", action_reference=reference, required_resource=resource)
        with pytest.raises(StepActionError):
            ActionResolver(tmp_path).resolve(step)

    def test_step_without_reference(self) -> None:
        step = Step(id="a", kind="batch")
        with pytest.raises(StepActionError, match="no action_reference"):
            ActionResolver().resolve(step)
