"""Names shared by the SDK tools and the environment they read."""

ANDROID_CACHE = ".android"
DDMS_CONFIG = "ddms.cfg"
LOCAL_REPO_CONFIG = "repositories.cfg"

ENV_ADB_TRACE = "ADB_TRACE"
ENV_ADB_LOCAL_TRANSPORT_MAX_PORT = "ADB_LOCAL_TRANSPORT_MAX_PORT"
ENV_ANDROID_SDK_ROOT = "ANDROID_SDK_ROOT"
ENV_ANDROID_HOME = "ANDROID_HOME"
ENV_ANDROID_SDK_HOME = "ANDROID_SDK_HOME"
# Location of AVD-specific data files, e.g. ~/.android/avd/
ENV_ANDROID_AVD_HOME = "ANDROID_AVD_HOME"
# Location of emulator-specific data files, e.g. ~/.android/
ENV_ANDROID_EMULATOR_HOME = "ANDROID_EMULATOR_HOME"
ENV_HTTP_PROXY = "HTTP_PROXY"
ENV_HTTPS_PROXY = "HTTPS_PROXY"
ENV_PATH = "PATH"

ADB_TRACE_ALL = "all,adb,sockets,packets,rwx,usb,sync,sysdeps,transport,jdwp"
ADB_DEFAULT_PORT = 5037
ADB_TRANSPORT_BASE_PORT = 5553

EMULATOR_DEFAULT_PORT = 5554
EMULATOR_MIN_PORT = 5554
EMULATOR_MAX_PORT = 5682
