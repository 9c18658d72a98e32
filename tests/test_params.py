import pytest

from filtermerge.params import ChildFilterSpec, MergeConfig, default_params, normalize_params
from filtermerge.utils import ConfigError


def test_normalize_defaults_and_string_sugar():
    cfg = normalize_params({"filters": ["matcher", {"name": "sorter", "limit": 5, "weight": 2}]})
    assert cfg == MergeConfig(
        filters=(ChildFilterSpec("matcher", 0, 1.0), ChildFilterSpec("sorter", 5, 2.0)),
        unique=True,
    )


def test_string_and_mapping_specs_are_equivalent():
    a = normalize_params({"filters": ["x"]})
    b = normalize_params({"filters": [{"name": "x"}]})
    assert a == b


def test_default_params_normalize_to_empty():
    cfg = normalize_params(default_params())
    assert cfg.filters == ()
    assert cfg.unique is True


def test_fractional_limit_truncates():
    cfg = normalize_params({"filters": [{"name": "x", "limit": 2.7}]})
    assert cfg.filters[0].limit == 2


@pytest.mark.parametrize("raw", [{}, {"filters": "matcher"}, {"filters": None}, None, []])
def test_filters_must_be_a_list(raw):
    with pytest.raises(ConfigError):
        normalize_params(raw)


@pytest.mark.parametrize("entry", [1, None, ["x"], {"limit": 1}, {"name": 3}])
def test_bad_child_entry(entry):
    with pytest.raises(ConfigError):
        normalize_params({"filters": [entry]})


@pytest.mark.parametrize("key", ["limit", "weight"])
@pytest.mark.parametrize("value", ["1", None, True, [1]])
def test_limit_and_weight_must_be_numbers(key, value):
    with pytest.raises(ConfigError):
        normalize_params({"filters": [{"name": "x", key: value}]})


@pytest.mark.parametrize("weight", [0, -1, -0.5])
def test_non_positive_weight_names_value(weight):
    with pytest.raises(ConfigError) as exc:
        normalize_params({"filters": ["ok", {"name": "good", "weight": 3}, {"name": "bad", "weight": weight}]})
    assert str(weight) in str(exc.value)
    assert "weight" in str(exc.value)


@pytest.mark.parametrize("unique", [None, 0, 1, "true"])
def test_unique_present_must_be_bool(unique):
    with pytest.raises(ConfigError):
        normalize_params({"filters": [], "unique": unique})


def test_unique_false_kept():
    assert normalize_params({"filters": [], "unique": False}).unique is False


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)


@pytest.mark.parametrize("limit", [float("nan"), float("inf"), float("-inf"), 1e309])
def test_non_finite_limit_is_unlimited(limit):
    cfg = normalize_params({"filters": [{"name": "x", "limit": limit}]})
    assert cfg.filters[0].limit == 0


def test_nan_weight_rejected():
    with pytest.raises(ConfigError) as exc:
        normalize_params({"filters": [{"name": "x", "weight": float("nan")}]})
    assert "nan" in str(exc.value)
