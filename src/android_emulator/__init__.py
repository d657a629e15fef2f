"""Android emulator provisioning toolkit.

Provides:
- typed command builders for sdkmanager, avdmanager, adb and emulator
- parsers for the human-oriented output of those tools
- a process adapter that runs built commands with merged environments
- an orchestrator that installs missing SDK components, starts adb,
  creates an AVD and launches the emulator
"""

__all__ = [
    "cli",
    "config",
    "errors",
    "runtime",
    "sdk",
    "tools",
]
