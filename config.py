#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Global constants for Lumen
All arbitrary values are centralized here for easy tracking and modification
"""

# =============================================================================
# APPLICATION METADATA
# =============================================================================

APP_NAME = "Lumen"                       # Folder name under the user data dir
APP_VERSION = "1.4.0"                    # Application version
APP_USER_AGENT = f"Lumen/{APP_VERSION}"  # User-Agent header for HTTP requests
DATA_DIR_ENV_VAR = "LUMEN_DATA_DIR"      # Overrides the user data directory when set


# =============================================================================
# CONTENT DELIVERY
# =============================================================================

CLIENT_CDN_BASE_URL = "https://www.smartycraft.ru/launcher/clients/"  # Client files are served below this prefix
AUTH_HOST_BASE_URL = "https://www.smartycraft.ru/launcher/"  # Auth, account and session hosts handed to the client
EXTRA_ARCHIVE_NAME = "extra.zip"         # Config bundle unpacked into the client root
WILDCARD_HASH = "any"                    # Manifest hash that skips content comparison


# =============================================================================
# NETWORK CONSTANTS
# =============================================================================

HTTP_CONNECT_TIMEOUT_S = 30              # Seconds to establish a connection
HTTP_READ_TIMEOUT_S = 300                # Seconds between received bytes before giving up
DOWNLOAD_CHUNK_SIZE = 64 * 1024          # Bytes per streamed chunk
DOWNLOAD_WORKERS_DEFAULT = 5             # Parallel file downloads
DOWNLOAD_PART_SUFFIX = ".part"           # Suffix for in-flight downloads
HTTP_POOL_CONNECTIONS = 10               # Connection pools kept by the shared session


# =============================================================================
# INTEGRITY CONSTANTS
# =============================================================================

HASH_CHUNK_SIZE = 64 * 1024              # Bytes read per hashing step
VERIFY_WORKERS_DEFAULT = 4               # Parallel file checks (1 = sequential)


# =============================================================================
# CLIENT LAYOUT
# =============================================================================

# First path segments that are part of the client tree itself (never a build prefix)
CLIENT_ROOT_DIRS = frozenset({
    "mods", "config", "bin", "assets", "libraries", "resources",
    "saves", "resourcepacks", "shaderpacks", "natives",
})
MODS_DIR_NAME = "mods"
LIBRARIES_DIR_NAME = "libraries"
ASSETS_DIR_NAME = "assets"
PRIMARY_ARTIFACT_NAME = "minecraft.jar"  # Game jar appended to the classpath
ASSETS_MIN_OBJECTS = 10                  # Fewer entries in assets/objects means re-unpack


# =============================================================================
# JAVA RUNTIME CONSTANTS
# =============================================================================

RUNTIMES_DIR_NAME = "runtimes"
JAVA_EXECUTABLE_NAMES = ("java", "java.exe")
JAVA_DEFAULT_MAJOR_VERSION = 8
ARCHIVE_MAX_UNCOMPRESSED_BYTES = 2 * 1024 * 1024 * 1024  # Refuse runtime archives expanding past 2 GiB
LWJGL_MAVEN_BASE_URL = "https://repo1.maven.org/maven2/org/lwjgl/"
LWJGL_FALLBACK_VERSION = "3.3.3"
LWJGL_FALLBACK_MODULES = ("lwjgl", "lwjgl-glfw", "lwjgl-openal", "lwjgl-opengl", "lwjgl-stb", "lwjgl-jemalloc")
NATIVE_LIBRARY_SUFFIXES = (".so", ".dll", ".dylib", ".jnilib")


# =============================================================================
# LAUNCH CONSTANTS
# =============================================================================

MEMORY_DEFAULT_MB = 4096                 # Heap limit when the profile has none
MEMORY_MIN_ACCEPTED_MB = 768             # Anything lower is treated as a typo
MEMORY_FLOOR_MB = 1024                   # Replacement for rejected values
MEMORY_INITIAL_HEAP_MB = 512             # -Xms value
WINDOW_WIDTH_DEFAULT = 925
WINDOW_HEIGHT_DEFAULT = 530
REDACTED_PLACEHOLDER = "********"        # Replaces the access token in logged commands
LAUNCH_BRAND_NAME = "Lumen"

# GC and compatibility flags applied to every client
BASE_JVM_ARGS = (
    "-XX:+UseG1GC",
    "-XX:+UnlockExperimentalVMOptions",
    "-XX:G1NewSizePercent=20",
    "-XX:G1ReservePercent=20",
    "-XX:MaxGCPauseMillis=50",
    "-XX:G1HeapRegionSize=32M",
    "-Dfml.ignoreInvalidMinecraftCertificates=true",
    "-Dfml.ignorePatchDiscrepancies=true",
)

# Environment variables removed before spawning the client JVM
STRIPPED_ENV_VARS = (
    "JAVA_TOOL_OPTIONS",
    "_JAVA_OPTIONS",
    "JDK_JAVA_OPTIONS",
    "JAVA_OPTIONS",
    "CLASSPATH",
    "JAVA_HOME",
)


# =============================================================================
# PROCESS & THREAD TIMEOUT CONSTANTS
# =============================================================================

PROCESS_TERMINATE_TIMEOUT_S = 5         # Timeout for process.wait() after terminate/kill
THREAD_JOIN_TIMEOUT_S = 2               # Timeout for thread.join() on shutdown
EXECUTOR_POLL_INTERVAL_S = 0.1          # Poll interval while waiting on worker futures
DOWNLOAD_PROGRESS_INTERVAL_S = 0.1      # Minimum gap between byte-level progress reports


# =============================================================================
# ISSUE REPORTING
# =============================================================================

ISSUES_FILE_NAME = "lumen_issues.txt"
ISSUES_FILE_MAX_BYTES = 1_500_000       # Trim the issues file past this size
ISSUES_FILE_KEEP_LINES = 4000           # Lines kept after trimming


# =============================================================================
# LOGGING CONSTANTS
# =============================================================================

LOG_MAX_FILE_SIZE_MB_DEFAULT = 10       # Rotate a session log past this size
LOG_MAX_AGE_S = 7 * 24 * 60 * 60        # Delete logs older than a week
LOG_SEPARATOR_WIDTH = 80                # Width of separator lines in logs (e.g., "=" * 80)
LOG_FILE_PREFIX = "lumen"
LOG_FILE_PATTERN = "lumen_*.log*"
UPDATER_LOG_PREFIX = "log_updater"
UPDATER_LOG_FILE_PATTERN = "log_updater_*.log*"
CLIENT_LOG_PREFIX = "log_client"
CLIENT_LOG_FILE_PATTERN = "log_client_*.log*"
LOG_TIMESTAMP_FORMAT = "%d-%m-%Y_%H-%M-%S"  # European format, Windows-compatible


# =============================================================================
# DEFAULT ARGUMENTS
# =============================================================================

DEFAULT_VERBOSE = False
DEFAULT_WAIT_FOR_CLIENT = True
