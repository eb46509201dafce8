from __future__ import annotations

import os
from pathlib import Path

import pytest

from config import AUTH_HOST_BASE_URL, BASE_JVM_ARGS, REDACTED_PLACEHOLDER
from launcher.errors import ConfigurationError
from launcher.launch import (
    build_classpath,
    build_command,
    build_launch_spec,
    build_module_path,
    collect_libraries,
    get_version_profile,
    redact_command,
    resolve_memory,
)
from launcher.launch.command_builder import format_command
from launcher.launch.version_profiles import NEOFORGE_MODULES
from launcher.models import LaunchSettings, ServerProfile, SessionData
from launcher.runtime import HostOS

TOKEN = "secretTok"


def _session() -> SessionData:
    return SessionData(player_name="Steve", uuid="uuid-1", access_token=TOKEN)


def _target(version: str = "1.12.2") -> ServerProfile:
    return ServerProfile(name="Industrial", version=version, address="mc.example", port=25565)


def _spec(tmp_path: Path, settings: LaunchSettings = None, version: str = "1.12.2"):
    return build_launch_spec(_session(), _target(version), tmp_path, tmp_path / "java" / "bin" / "java", settings)


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")


@pytest.mark.parametrize("requested, expected", [(None, 4096), (0, 4096), (512, 1024), (768, 768), (6144, 6144)])
def test_resolve_memory(requested, expected) -> None:
    assert resolve_memory(requested) == expected


def test_collect_libraries_orders_bootstrap_first_and_filters_foreign_natives(tmp_path: Path) -> None:
    libs = tmp_path / "libraries"
    _touch(libs / "org" / "lwjgl" / "lwjgl-3.3.3-natives-windows.jar")
    _touch(libs / "org" / "lwjgl" / "lwjgl-3.3.3-natives-linux.jar")
    _touch(libs / "com" / "google" / "guava-21.jar")
    _touch(libs / "net" / "minecraft" / "launchwrapper-1.12.jar")
    _touch(libs / "notes.txt")

    names = [p.name for p in collect_libraries(tmp_path, HostOS.LINUX)]

    assert names == ["launchwrapper-1.12.jar", "guava-21.jar", "lwjgl-3.3.3-natives-linux.jar"]


def test_build_classpath_ends_with_primary_jar(tmp_path: Path) -> None:
    _touch(tmp_path / "libraries" / "a.jar")

    entries = build_classpath(tmp_path, HostOS.WINDOWS).split(os.pathsep)

    assert entries == [str(tmp_path.absolute() / "libraries" / "a.jar"), str(tmp_path.absolute() / "minecraft.jar")]


def test_build_command_orders_jvm_then_main_class_then_game_args(tmp_path: Path) -> None:
    spec = _spec(tmp_path, LaunchSettings(memory_mb=2048, jvm_args=("-Dcustom=1",)))

    cmd = build_command(spec, host_os=HostOS.LINUX, classpath="CP")

    assert cmd[0] == str(tmp_path / "java" / "bin" / "java")
    assert cmd[1:3] == ["-Xmx2048M", "-Xms512M"]
    assert cmd[3:3 + len(BASE_JVM_ARGS)] == list(BASE_JVM_ARGS)
    assert cmd.index("-Dcustom=1") < cmd.index("-cp")
    assert cmd[cmd.index("-cp") + 1] == "CP"
    main_index = cmd.index("net.minecraft.launchwrapper.Launch")
    assert cmd.index("-cp") < main_index < cmd.index("--username")
    assert f"-Djava.library.path={tmp_path.absolute() / 'bin' / 'natives-1.12.2'}" in cmd
    assert cmd[cmd.index("--accessToken") + 1] == TOKEN
    assert cmd[cmd.index("--version") + 1] == "Forge 1.12.2"
    assert cmd[cmd.index("--server") + 1] == "mc.example"
    assert cmd[cmd.index("--port") + 1] == "25565"
    assert cmd[-2:] == ["--tweakClass", "net.minecraftforge.fml.common.launcher.FMLTweaker"]
    assert "-XstartOnFirstThread" not in cmd


def test_build_command_window_options(tmp_path: Path) -> None:
    windowed = build_command(_spec(tmp_path, LaunchSettings(window_width=1280, window_height=720)), HostOS.WINDOWS, "CP")
    fullscreen = build_command(_spec(tmp_path, LaunchSettings(fullscreen=True, auto_connect=False)), HostOS.MACOS, "CP")

    assert windowed[windowed.index("--width") + 1] == "1280"
    assert windowed[windowed.index("--height") + 1] == "720"
    assert "--fullscreen" in fullscreen
    assert "--width" not in fullscreen
    assert "--server" not in fullscreen
    assert "-XstartOnFirstThread" in fullscreen


def test_build_command_modern_profile_has_no_tweak_class(tmp_path: Path) -> None:
    cmd = build_command(_spec(tmp_path, version="1.21.1"), HostOS.LINUX, "CP")

    assert "cpw.mods.bootstraplauncher.BootstrapLauncher" in cmd
    assert "--tweakClass" not in cmd
    assert cmd[cmd.index("--launchTarget") + 1] == "forgeclient"


def test_unknown_client_version_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        build_command(_spec(tmp_path, version="1.5.2"), HostOS.LINUX, "CP")
    assert get_version_profile("1.12.2-forge").asset_index == "1.12.2"


def test_redacted_command_never_contains_token(tmp_path: Path) -> None:
    cmd = build_command(_spec(tmp_path), HostOS.LINUX, "CP")

    redacted = redact_command(cmd, TOKEN)
    rendered = format_command(redacted)

    assert TOKEN in cmd
    assert TOKEN not in rendered
    assert redacted[redacted.index("--accessToken") + 1] == REDACTED_PLACEHOLDER
    assert len(redacted) == len(cmd)
    assert TOKEN not in repr(_session())


def test_every_profile_points_the_client_at_the_launcher_auth_hosts(tmp_path: Path) -> None:
    for version in ("1.7.10", "1.12.2", "1.21.1"):
        cmd = build_command(_spec(tmp_path, version=version), HostOS.WINDOWS, "CP")

        assert "-noverify" in cmd
        for service in ("auth", "account", "session"):
            assert f"-Dminecraft.api.{service}.host={AUTH_HOST_BASE_URL}" in cmd
        assert "-p" not in cmd or version == "1.21.1"


def _neoforge_tree(root: Path) -> Path:
    libs = root / "libraries-1.21.1"
    for module in NEOFORGE_MODULES:
        _touch(libs / module)
    _touch(libs / "net" / "neoforged" / "neoforge-21.1.504-universal.jar")
    _touch(libs / "net" / "minecraft" / "client-1.21.1-srg.jar")
    _touch(libs / "com" / "google" / "guava-32.jar")
    return libs


def test_neoforge_command_boots_from_the_module_path(tmp_path: Path) -> None:
    _neoforge_tree(tmp_path)
    root = tmp_path.absolute()

    cmd = build_command(_spec(tmp_path, version="1.21.1"), HostOS.LINUX)

    modules = cmd[cmd.index("-p") + 1].split(os.pathsep)
    assert modules == [str(root / "libraries-1.21.1" / module) for module in NEOFORGE_MODULES]
    classpath = cmd[cmd.index("-cp") + 1].split(os.pathsep)
    assert classpath == [str(root / "libraries-1.21.1" / "com" / "google" / "guava-32.jar"), str(root / "minecraft.jar")]
    assert cmd.index("-p") < cmd.index("-cp") < cmd.index("cpw.mods.bootstraplauncher.BootstrapLauncher")
    assert f"-DlibraryDirectory={root / 'libraries-1.21.1'}" in cmd
    assert f"-Djna.tmpdir={root / 'bin' / 'natives-1.21.1'}" in cmd
    ignore_list = next(arg for arg in cmd if arg.startswith("-DignoreList="))
    assert "securejarhandler-3.0.8.jar" in ignore_list.split("=", 1)[1].split(",")
    assert "-DmergeModules=jna-5.10.0.jar,jna-platform-5.10.0.jar" in cmd
    assert cmd[cmd.index("--fml.neoForgeVersion") + 1] == "21.1.504"
    assert cmd[cmd.index("--fml.mcVersion") + 1] == "1.21.1"
    assert cmd.index("--accessToken") < cmd.index("--fml.neoForgeVersion")


def test_neoforge_module_path_skips_missing_jars(tmp_path: Path) -> None:
    profile = get_version_profile("1.21.1")
    present = tmp_path / "libraries" / NEOFORGE_MODULES[0]
    _touch(present)

    assert build_module_path(tmp_path, profile) == [present.absolute()]


def test_redaction_targets_only_the_access_token_value(tmp_path: Path) -> None:
    cmd = ["/opt/jdk42/bin/java", "-Xmx4096M", "--uuid", "u-42", "--accessToken", "42", "--gameDir", "/srv/42"]

    redacted = redact_command(cmd, "42")

    assert redacted == [
        "/opt/jdk42/bin/java", "-Xmx4096M", "--uuid", "u-42", "--accessToken", REDACTED_PLACEHOLDER, "--gameDir", "/srv/42",
    ]
    assert redact_command(["java", "-Dtoken=abc123"], "abc123") == ["java", f"-Dtoken={REDACTED_PLACEHOLDER}"]
