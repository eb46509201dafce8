#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Launch profiles per client version
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from launcher.errors import ConfigurationError


@dataclass(frozen=True)
class VersionProfile:
    main_class: str
    asset_index: str
    natives_dir: str
    tweak_class: Optional[str] = None
    jvm_args: Tuple[str, ...] = ()
    # Between the main class and the game arguments
    program_args: Tuple[str, ...] = ()
    # After the game arguments
    extra_game_args: Tuple[str, ...] = ()
    # LWJGL 2 artifact version used when natives must be fetched from Maven; None means LWJGL 3
    lwjgl2_version: Optional[str] = None
    # Jars (relative to the libraries directory) booted from the module path with -p
    module_path: Tuple[str, ...] = ()
    # File name prefixes kept off -cp; module path jars are always excluded
    classpath_excludes: Tuple[str, ...] = ()
    # Preferred libraries directory, used when it holds a "cpw" tree
    libraries_dir: Optional[str] = None
    # Values of -DignoreList and -DmergeModules for the module layer
    ignore_list: Tuple[str, ...] = ()
    merge_modules: Tuple[str, ...] = ()

    @property
    def is_modular(self) -> bool:
        return bool(self.module_path)


LAUNCHWRAPPER_MAIN = "net.minecraft.launchwrapper.Launch"

NEOFORGE_VERSION = "21.1.504"
NEOFORGE_MODULES = (
    "cpw/mods/securejarhandler/3.0.8/securejarhandler-3.0.8.jar",
    "org/ow2/asm/asm/9.7/asm-9.7.jar",
    "org/ow2/asm/asm-commons/9.7/asm-commons-9.7.jar",
    "org/ow2/asm/asm-tree/9.7/asm-tree-9.7.jar",
    "org/ow2/asm/asm-util/9.7/asm-util-9.7.jar",
    "org/ow2/asm/asm-analysis/9.7/asm-analysis-9.7.jar",
    "cpw/mods/bootstraplauncher/2.0.2/bootstraplauncher-2.0.2.jar",
    "net/neoforged/JarJarFileSystems/0.4.1/JarJarFileSystems-0.4.1.jar",
)

VERSION_PROFILES: Dict[str, VersionProfile] = {
    "1.7.10": VersionProfile(
        main_class=LAUNCHWRAPPER_MAIN,
        tweak_class="cpw.mods.fml.common.launcher.FMLTweaker",
        asset_index="1.7.10",
        natives_dir="bin/natives-1.7.10",
        jvm_args=("-Dorg.lwjgl.opengl.Display.allowSoftwareOpenGL=true",),
        lwjgl2_version="2.9.1",
    ),
    "1.12.2": VersionProfile(
        main_class=LAUNCHWRAPPER_MAIN,
        tweak_class="net.minecraftforge.fml.common.launcher.FMLTweaker",
        asset_index="1.12.2",
        natives_dir="bin/natives-1.12.2",
        lwjgl2_version="2.9.4-nightly-20150209",
    ),
    "1.21.1": VersionProfile(
        main_class="cpw.mods.bootstraplauncher.BootstrapLauncher",
        asset_index="1.21.1",
        natives_dir="bin/natives-1.21.1",
        jvm_args=(
            "--add-modules=ALL-MODULE-PATH",
            "--add-reads=org.openjdk.nashorn=ALL-UNNAMED",
            "--add-modules=jdk.naming.dns",
            "--add-exports=jdk.naming.dns/com.sun.jndi.dns=java.naming",
            "--add-opens=java.base/java.util.jar=ALL-UNNAMED",
            "--add-opens=java.base/java.lang.invoke=ALL-UNNAMED",
            "--add-opens=java.base/java.lang=ALL-UNNAMED",
            "--add-opens=java.base/java.util=ALL-UNNAMED",
            "--add-opens=java.base/java.io=ALL-UNNAMED",
            "--add-opens=java.base/java.nio=ALL-UNNAMED",
            "--add-opens=java.base/sun.nio.ch=ALL-UNNAMED",
            "--add-opens=java.base/java.time=ALL-UNNAMED",
            "--add-opens=java.base/java.util.jar=cpw.mods.securejarhandler",
            "--add-opens=java.base/java.lang.invoke=cpw.mods.securejarhandler",
            "--add-exports=java.base/sun.security.util=cpw.mods.securejarhandler",
            "-Djava.awt.headless=false",
            "-Djava.net.preferIPv6Addresses=system",
        ),
        program_args=("--launchTarget", "forgeclient"),
        extra_game_args=(
            "--fml.neoForgeVersion", NEOFORGE_VERSION,
            "--fml.fmlVersion", "4.0.34",
            "--fml.mcVersion", "1.21.1",
            "--fml.neoFormVersion", "20240808.144430",
        ),
        module_path=NEOFORGE_MODULES,
        classpath_excludes=("neoforge-", "client-1.21.1"),
        libraries_dir="libraries-1.21.1",
        ignore_list=(
            "client",
            *(module.rsplit("/", 1)[-1] for module in NEOFORGE_MODULES),
            "client-extra",
            "neoforge-",
            f"neoforge-{NEOFORGE_VERSION}.jar",
        ),
        merge_modules=("jna-5.10.0.jar", "jna-platform-5.10.0.jar"),
    ),
}


def get_version_profile(version: str) -> VersionProfile:
    """Exact match first, then the first registered version that prefixes it.

    Raises:
        ConfigurationError: the client version has no launch profile
    """
    profile = VERSION_PROFILES.get(version)
    if profile is not None:
        return profile
    for key, candidate in VERSION_PROFILES.items():
        if version.startswith(key):
            return candidate
    raise ConfigurationError(f"Unsupported client version: {version}")
