from __future__ import annotations

from pathlib import Path

import pytest

from launcher.errors import ConfigurationError
from launcher.manifest import (
    check_relative_path,
    compute_ignored_files,
    flatten,
    flatten_for_client,
    normalize_client_path,
    parse_optional_mods,
    remove_disabled_mods,
    resolve_client_file,
)
from launcher.models import FileEntry, FileManifest, ServerProfile


def _manifest() -> FileManifest:
    return FileManifest.from_dict({
        "files": {"a.txt": {"md5": "X", "size": 3}},
        "directories": {"mods": {"files": {"b.jar": {"md5": "Y", "size": 10}}}},
    })


def test_flatten_joins_nested_names_with_slash() -> None:
    assert flatten(_manifest()) == {
        "a.txt": FileEntry("X", 3),
        "mods/b.jar": FileEntry("Y", 10),
    }


def test_flatten_missing_manifest_is_empty() -> None:
    assert flatten(None) == {}
    assert flatten(FileManifest.from_dict(None)) == {}


def test_flatten_tolerates_null_submaps_at_any_depth() -> None:
    manifest = FileManifest.from_dict({
        "files": None,
        "directories": {
            "config": {"files": None, "directories": None},
            "mods": {"directories": {"deep": {"files": {"c.jar": {"md5": "Z"}}}}},
        },
    })

    assert flatten(manifest) == {"mods/deep/c.jar": FileEntry("Z", 0)}


def test_normalize_client_path_strips_build_directory() -> None:
    assert normalize_client_path("Industrial/mods/a.jar") == "mods/a.jar"
    assert normalize_client_path("mods/a.jar") == "mods/a.jar"
    assert normalize_client_path("minecraft.jar") == "minecraft.jar"
    assert normalize_client_path("libraries\\x\\y.jar") == "libraries/x/y.jar"


def test_flatten_for_client_keeps_server_paths_for_downloads() -> None:
    manifest = FileManifest.from_dict({
        "directories": {
            "Industrial": {
                "files": {"minecraft.jar": {"md5": "M"}},
                "directories": {"mods": {"files": {"opt.jar": {"md5": "O"}}}},
            },
        },
    })

    client_files = flatten_for_client(manifest)

    assert set(client_files.entries) == {"minecraft.jar", "mods/opt.jar"}
    assert client_files.remote_path("mods/opt.jar") == "Industrial/mods/opt.jar"
    assert client_files.remote_path("unknown.txt") == "unknown.txt"


def test_flatten_for_client_drops_ignored_files() -> None:
    client_files = flatten_for_client(_manifest(), {"b.jar"})

    assert set(client_files.entries) == {"a.txt"}


def test_flatten_for_client_skips_entries_leaving_the_root() -> None:
    manifest = FileManifest.from_dict({
        "files": {"ok.txt": {"md5": "A"}},
        "directories": {
            "mods": {"directories": {"..": {"directories": {"..": {"files": {"evil.txt": {"md5": "E"}}}}}}},
        },
    })

    assert set(flatten_for_client(manifest).entries) == {"ok.txt"}


@pytest.mark.parametrize("bad_path", ["", "/etc/passwd", "C:/x.txt", "mods/../../x", "./a", "mods//a.jar"])
def test_check_relative_path_rejects_escaping_paths(bad_path: str) -> None:
    with pytest.raises(ConfigurationError):
        check_relative_path(bad_path)


def test_resolve_client_file_stays_below_root(tmp_path: Path) -> None:
    assert resolve_client_file(tmp_path, "mods/a.jar") == tmp_path.resolve() / "mods" / "a.jar"
    with pytest.raises(ConfigurationError):
        resolve_client_file(tmp_path, "../outside.txt")


def test_parse_optional_mods_fills_defaults() -> None:
    profile = ServerProfile(
        name="Industrial",
        version="1.12.2",
        optional_mods={
            "journeymap": {"name": "JourneyMap", "default": True},
            "optifine": {"id": "of", "jars": ["OptiFine.jar"], "selected": False, "default": True},
            "broken": "not-an-object",
        },
    )

    mods = {mod.id: mod for mod in parse_optional_mods(profile)}

    assert set(mods) == {"journeymap", "of"}
    assert mods["journeymap"].jars == ["journeymap.jar"]
    assert mods["journeymap"].enabled_by_default is True
    assert mods["of"].jars == ["OptiFine.jar"]
    assert mods["of"].enabled_by_default is False


def test_compute_ignored_files_uses_player_state_over_defaults() -> None:
    profile = ServerProfile(
        name="Industrial",
        version="1.12.2",
        optional_mods={
            "journeymap": {"default": True, "infoFile": "journeymap.txt"},
            "optifine": {"default": False},
        },
    )
    mods = parse_optional_mods(profile)

    assert compute_ignored_files(mods, {}) == {"optifine.jar"}
    assert compute_ignored_files(mods, {"journeymap": False, "optifine": True}) == {
        "journeymap.jar",
        "journeymap.txt",
    }


def test_remove_disabled_mods_deletes_only_matching_files(tmp_path: Path) -> None:
    mods_dir = tmp_path / "mods"
    (mods_dir / "1.12.2").mkdir(parents=True)
    (mods_dir / "optifine.jar").write_bytes(b"x")
    (mods_dir / "1.12.2" / "optifine.jar").write_bytes(b"x")
    (mods_dir / "keep.jar").write_bytes(b"x")

    removed = remove_disabled_mods(tmp_path, {"optifine.jar"})

    assert removed == 2
    assert sorted(p.name for p in mods_dir.rglob("*.jar")) == ["keep.jar"]
