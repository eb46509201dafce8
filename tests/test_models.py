from __future__ import annotations

import pytest

from launcher.errors import AggregateDownloadError, ConfigurationError, PipelineError
from launcher.models import FileEntry, LaunchSettings, ServerProfile, SessionData
from launcher.pipeline import PipelineStage


def test_session_from_dict_reads_auth_fields() -> None:
    session = SessionData.from_dict({
        "playername": "Steve",
        "uuid": "u-1",
        "session": "tok",
        "client": {"files": {"minecraft.jar": {"md5": "ABC", "size": 7}}},
    })

    assert session.player_name == "Steve"
    assert session.access_token == "tok"
    assert session.file_manifest.files["minecraft.jar"] == FileEntry("ABC", 7)
    assert "tok" not in repr(session)


def test_server_profile_defaults_asset_dir_to_name() -> None:
    target = ServerProfile.from_dict({"name": "Industrial", "version": "1.12.2", "ip": "mc.example", "port": "25565"})

    assert target.server_id == "Industrial"
    assert target.address == "mc.example"
    assert target.port == 25565
    assert str(target) == "Industrial 1.12.2"

    with pytest.raises(ConfigurationError):
        ServerProfile.from_dict({"name": "Industrial"})


def test_launch_settings_from_dict() -> None:
    settings = LaunchSettings.from_dict({
        "memoryMb": 3072,
        "jvmArgs": "-Da=1 -Db=2",
        "fullScreen": True,
        "optionalModsState": {"optifine": True},
    })

    assert settings.memory_mb == 3072
    assert settings.jvm_args == ("-Da=1", "-Db=2")
    assert settings.fullscreen is True
    assert settings.optional_mods_state == {"optifine": True}
    assert LaunchSettings.from_dict(None) == LaunchSettings()


def test_pipeline_error_carries_failed_count() -> None:
    error = PipelineError(PipelineStage.DOWNLOADING, AggregateDownloadError(4))

    assert error.failed_count == 4
    assert str(error) == "downloading failed: 4 file(s) failed to download"


def test_stage_order_is_forward() -> None:
    assert PipelineStage.INIT.order < PipelineStage.VERIFYING.order < PipelineStage.LAUNCHED.order
    assert PipelineStage.LAUNCHED.is_terminal and PipelineStage.FAILED.is_terminal
    assert not PipelineStage.DOWNLOADING.is_terminal
