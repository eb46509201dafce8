#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Update Sequence
Verifies, downloads, provisions the runtime and launches the client, in that order
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import psutil

from config import UPDATER_LOG_PREFIX
from launcher.download.extra_archive import apply_extra_archive
from launcher.download.file_downloader import DownloadProgress, FileDownloader, format_speed
from launcher.errors import ConfigurationError, LauncherError, PipelineCancelled, PipelineError
from launcher.integrity.verifier import IntegrityVerifier
from launcher.launch.command_builder import build_command, build_launch_spec
from launcher.launch.natives import NativesPreparer
from launcher.launch.process_launcher import OutputCallback, ProcessLauncher
from launcher.launch.version_profiles import get_version_profile
from launcher.manifest.flattener import flatten_for_client
from launcher.manifest.optional_mods import compute_ignored_files, parse_optional_mods, remove_disabled_mods
from launcher.models import LaunchSettings, ServerProfile, SessionData
from launcher.pipeline.states import PipelineStage, ProgressCallback, ProgressEvent
from launcher.runtime.provisioner import RuntimeProvisioner
from utils.core.issue_reporter import report_issue
from utils.core.logging import get_logger, get_named_logger, log_section, log_success, mask_secrets, register_secret
from utils.core.paths import get_client_dir

log = get_logger()
updater_log = get_named_logger("updater", prefix=UPDATER_LOG_PREFIX)

_ISSUE_HINTS = {
    PipelineStage.DOWNLOADING: "Check your internet connection and press Play again.",
    PipelineStage.PROVISIONING_RUNTIME: "Set a custom Java path in the instance settings.",
    PipelineStage.LAUNCHING: "Check the client log in the logs folder.",
}


class UpdateLaunchPipeline:
    """Runs one update/launch attempt; a retry means calling run() again"""

    def __init__(
        self,
        verifier: Optional[IntegrityVerifier] = None,
        downloader: Optional[FileDownloader] = None,
        provisioner: Optional[RuntimeProvisioner] = None,
        natives: Optional[NativesPreparer] = None,
        launcher: Optional[ProcessLauncher] = None,
    ):
        self.verifier = verifier or IntegrityVerifier()
        self.downloader = downloader or FileDownloader()
        self.provisioner = provisioner or RuntimeProvisioner()
        self.natives = natives or NativesPreparer(session=self.downloader.session)
        self.launcher = launcher or ProcessLauncher()
        self.stage = PipelineStage.INIT
        self.failed_stage: Optional[PipelineStage] = None
        self._progress: Optional[ProgressCallback] = None

    def _emit(self, message: str, fraction: Optional[float] = None) -> None:
        updater_log.debug(f"[PIPELINE] {self.stage.value}: {message}")
        if self._progress is None:
            return
        try:
            self._progress(ProgressEvent(self.stage, message, fraction))
        except Exception as exc:  # noqa: BLE001
            log.debug(f"[PIPELINE] Progress callback failed: {exc}")

    def _advance(self, stage: PipelineStage, message: str, fraction: Optional[float] = None) -> None:
        if stage.order <= self.stage.order or self.stage.is_terminal:
            raise RuntimeError(f"Illegal pipeline transition {self.stage.value} -> {stage.value}")
        self.stage = stage
        updater_log.info(f"[PIPELINE] -> {stage.value}: {message}")
        self._emit(message, fraction)

    @staticmethod
    def _check_cancel(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelled("Update cancelled")

    def run(
        self,
        session: SessionData,
        target: ServerProfile,
        settings: Optional[LaunchSettings] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
        client_root: Optional[Path] = None,
        on_output: Optional[OutputCallback] = None,
    ) -> psutil.Popen:
        """Bring the client up to date and start it.

        Args:
            session: Auth result carrying the file manifest and token
            target: Server to play on
            settings: Player preferences for this instance
            progress_callback: Receives a ProgressEvent on every transition and download step
            cancel_event: Checked between files and between stages
            client_root: Override for clients/<serverId>
            on_output: Receives the client's output lines

        Returns:
            Live handle of the client process

        Raises:
            PipelineError: carries the failing stage, the cause and the failed file count
        """
        if self.stage is not PipelineStage.INIT:
            raise RuntimeError("Pipeline instances run once; create a new one to retry")
        settings = settings or LaunchSettings()
        self._progress = progress_callback
        register_secret(session.access_token)

        try:
            return self._run(session, target, settings, cancel_event, client_root, on_output)
        except PipelineError:
            raise
        except (LauncherError, OSError) as exc:
            raise self._fail(exc) from exc
        except Exception as exc:  # noqa: BLE001
            log.exception(f"[PIPELINE] Unexpected error during {self.stage.value}")
            raise self._fail(exc) from exc

    def _run(self, session, target, settings, cancel_event, client_root, on_output) -> psutil.Popen:
        if client_root is not None:
            root = Path(client_root)
        else:
            try:
                root = get_client_dir(target.server_id)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
        root.mkdir(parents=True, exist_ok=True)
        log_section(log, "Preparing client", "🎮", {"Server": str(target), "Version": target.version})
        self._emit("Preparing client files...")

        mods = parse_optional_mods(target)
        ignored = compute_ignored_files(mods, settings.optional_mods_state)
        client_files = flatten_for_client(session.file_manifest, ignored)
        remove_disabled_mods(root, ignored)
        self._check_cancel(cancel_event)

        self._advance(PipelineStage.VERIFYING, "Checking files...")
        download_set = self.verifier.verify(root, client_files.entries)
        self._check_cancel(cancel_event)

        self._advance(PipelineStage.DOWNLOADING, f"Downloading {len(download_set)} file(s)...", 0.0)

        def on_progress(progress: DownloadProgress) -> None:
            message = f"Downloading: {progress.files_done} / {progress.files_total}"
            if progress.bytes_total:
                message += (
                    f" ({progress.bytes_done // 1024} / {progress.bytes_total // 1024} KB,"
                    f" {format_speed(progress.bytes_per_second)})"
                )
            self._emit(message, progress.fraction)

        self.downloader.download_all(
            root,
            download_set,
            on_progress,
            remote_paths=client_files.remote_paths,
            sizes={path: client_files.entries[path].size or 0 for path in download_set},
            cancel_event=cancel_event,
        )
        apply_extra_archive(root, client_files.entries.keys(), target.extra_checksum)
        self._check_cancel(cancel_event)

        self._advance(PipelineStage.PROVISIONING_RUNTIME, "Preparing Java...")
        runtime = self._resolve_runtime(target, settings, cancel_event)
        self._check_cancel(cancel_event)

        self._advance(PipelineStage.LAUNCHING, "Starting the game...", 0.0)
        profile = get_version_profile(target.version)
        self.natives.prepare_natives(root, profile, target.version)
        self.natives.prepare_assets(root, target.version)
        self._emit("Starting the game...", 0.5)
        spec = build_launch_spec(session, target, root, runtime, settings)
        proc = self.launcher.launch(spec, on_output=on_output, command=build_command(spec))

        self._advance(PipelineStage.LAUNCHED, "Game started", 1.0)
        log_success(log, f"{target} launched (PID={proc.pid})", "🚀")
        return proc

    def _resolve_runtime(self, target: ServerProfile, settings: LaunchSettings, cancel_event) -> Path:
        if settings.java_path:
            custom = Path(settings.java_path)
            if custom.is_file():
                updater_log.info(f"[RUNTIME] Using custom Java {custom}")
                return custom
            updater_log.warning(f"[RUNTIME] Custom Java path {custom} not found, using managed runtime")
        return self.provisioner.resolve_runtime(target.version, cancel_event)

    def _fail(self, cause: BaseException) -> PipelineError:
        stage = self.stage if not self.stage.is_terminal else PipelineStage.INIT
        self.failed_stage = stage
        self.stage = PipelineStage.FAILED
        error = PipelineError(stage, cause)
        summary = mask_secrets(str(error))

        if isinstance(cause, PipelineCancelled):
            updater_log.info(f"[PIPELINE] Cancelled during {stage.value}")
        else:
            updater_log.error(f"[PIPELINE] {summary}")
            details = {"stage": stage.value}
            if error.failed_count is not None:
                details["failed_files"] = error.failed_count
            report_issue(
                f"{stage.value.upper()}_FAILED",
                "error",
                summary,
                details=details,
                hint=_ISSUE_HINTS.get(stage),
            )
        self._emit(summary)
        return error
