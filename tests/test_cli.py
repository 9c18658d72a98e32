import json
import textwrap

import pytest

import cli
from filtermerge.merge import load_config, run_once
from filtermerge.utils import ConfigError

from stubs import make_items

CONFIG = textwrap.dedent(
    """
    name: default
    filters:
      reverse:
        ref: "stubs:SyncReverseFilter"
    params:
      filters:
        - reverse
        - name: missing
          weight: 2
      unique: true
    """
)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "merge.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


@pytest.mark.asyncio
async def test_run_once_from_yaml(config_path):
    out = await run_once(str(config_path), make_items("a", "b", "c"))
    assert [it["word"] for it in out] == ["c", "b", "a"]


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_cli_writes_output(tmp_path, config_path):
    items_path = tmp_path / "items.json"
    items_path.write_text(json.dumps(make_items("a", "b")), encoding="utf-8")
    out_path = tmp_path / "out.json"

    cli.main(["--config", str(config_path), "--items", str(items_path), "--output", str(out_path)])

    merged = json.loads(out_path.read_text(encoding="utf-8"))
    assert [it["word"] for it in merged] == ["b", "a"]


def test_cli_rejects_non_list_items(tmp_path, config_path):
    items_path = tmp_path / "items.json"
    items_path.write_text(json.dumps({"word": "a"}), encoding="utf-8")
    with pytest.raises(ValueError):
        cli.main(["--config", str(config_path), "--items", str(items_path)])


@pytest.mark.parametrize(
    "body",
    [
        "filters:\n  rev: 'stubs:SyncReverseFilter'\nparams:\n  filters: [rev]\n",
        "filters:\n  rev: {options: {}}\nparams:\n  filters: [rev]\n",
        "contexts:\n  files:\n    rev: 'stubs:SyncReverseFilter'\nparams:\n  filters: [rev]\n",
        "name: 3\nparams:\n  filters: []\n",
        "filters: {}\n",
    ],
)
def test_load_config_rejects_malformed_directory(tmp_path, body):
    path = tmp_path / "bad.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


@pytest.mark.asyncio
async def test_run_once_string_entry_fails_before_merge(tmp_path):
    path = tmp_path / "short.yaml"
    path.write_text("filters:\n  rev: 'stubs:SyncReverseFilter'\nparams:\n  filters: [rev]\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        await run_once(str(path), make_items("a"))
