import pytest

from tracewrap.codemod.nodes import TransformOptions
from tracewrap.config import DEFAULT_CONFIG_FILE, get_config_from_spec, get_config_path
from tracewrap.utils.serialize import UNSET, recursive_merge


def test_default_config_builds_default_options():
    config = get_config_from_spec(DEFAULT_CONFIG_FILE)
    assert config["run"]["workers"] >= 1
    options = TransformOptions(**config["transform"])
    assert options == TransformOptions()


def test_builtin_config_by_name():
    assert get_config_path("default") == DEFAULT_CONFIG_FILE
    assert get_config_path("default.yaml") == DEFAULT_CONFIG_FILE


def test_missing_config_file():
    with pytest.raises(FileNotFoundError):
        get_config_path("does-not-exist.yaml")


def test_config_from_yaml_file(tmp_path):
    path = tmp_path / "tracewrap.yaml"
    path.write_text("transform:\n  callee: span\n  skip:\n    - ^_\n")
    config = get_config_from_spec(str(path))
    assert config == {"transform": {"callee": "span", "skip": ["^_"]}}


@pytest.mark.parametrize(
    "spec,expected",
    [
        ("transform.callee=span", {"transform": {"callee": "span"}}),
        ("run.workers=8", {"run": {"workers": 8}}),
        ("transform.skip=[^_, ^test]", {"transform": {"skip": ["^_", "^test"]}}),
        ("transform.import_source=@acme/tracing", {"transform": {"import_source": "@acme/tracing"}}),
        ("transform.name_pattern=", {"transform": {"name_pattern": None}}),
    ],
)
def test_key_value_spec(spec, expected):
    assert get_config_from_spec(spec) == expected


# --- recursive_merge ---


def test_recursive_merge_later_wins():
    assert recursive_merge({"a": 1, "b": {"c": 1, "d": 2}}, {"b": {"c": 3}}) == {"a": 1, "b": {"c": 3, "d": 2}}


def test_recursive_merge_skips_unset():
    merged = recursive_merge(
        {"transform": {"callee": "trace", "skip": ["^_"]}},
        {"transform": {"callee": UNSET, "skip": UNSET}, "run": {"workers": UNSET}},
    )
    assert merged == {"transform": {"callee": "trace", "skip": ["^_"]}, "run": {}}


def test_recursive_merge_does_not_mutate_inputs():
    first = {"a": {"b": 1}}
    recursive_merge(first, {"a": {"b": 2}})
    assert first == {"a": {"b": 1}}


def test_recursive_merge_handles_none():
    assert recursive_merge(None, {"a": 1}, None) == {"a": 1}
    assert recursive_merge() == {}
