"""Signal names per platform and readable meanings for exit codes."""

import sys

_BSD_COMMON = [
    "SIGHUP", "SIGINT", "SIGQUIT", "SIGILL", "SIGTRAP", "SIGABRT", "SIGEMT", "SIGFPE",
    "SIGKILL", "SIGBUS", "SIGSEGV", "SIGSYS", "SIGPIPE", "SIGALRM", "SIGTERM", "SIGURG",
    "SIGSTOP", "SIGTSTP", "SIGCONT", "SIGCHLD", "SIGTTIN", "SIGTTOU", "SIGIO", "SIGXCPU",
    "SIGXFSZ", "SIGVTALRM", "SIGPROF", "SIGWINCH", "SIGINFO",
]


def _numbered(names):
    return dict(enumerate(names, start=1))


_SIGNALS = {
    "darwin": _numbered(_BSD_COMMON + ["SIGUSR1", "SIGUSR2"]),
    "dragonfly": {
        **_numbered(_BSD_COMMON),
        0x20: "SIGTHR",
        0x21: "SIGCKPT",
        0x22: "SIGCKPTEXIT",
    },
    "freebsd": _numbered(_BSD_COMMON + ["SIGUSR1", "SIGUSR2", "SIGTHR", "SIGLIBRT"]),
    "linux": _numbered([
        "SIGHUP", "SIGINT", "SIGQUIT", "SIGILL", "SIGTRAP", "SIGABRT", "SIGBUS", "SIGFPE",
        "SIGKILL", "SIGUSR1", "SIGSEGV", "SIGUSR2", "SIGPIPE", "SIGALRM", "SIGTERM",
        "SIGSTKFLT", "SIGCHLD", "SIGCONT", "SIGSTOP", "SIGTSTP", "SIGTTIN", "SIGTTOU",
        "SIGURG", "SIGXCPU", "SIGXFSZ", "SIGVTALRM", "SIGPROF", "SIGWINCH", "SIGIO",
        "SIGPWR", "SIGSYS",
    ]),
    "netbsd": _numbered(_BSD_COMMON + ["SIGUSR1", "SIGUSR2", "SIGPWR"]),
    "openbsd": _numbered(_BSD_COMMON + ["SIGUSR1", "SIGUSR2", "SIGTHR"]),
    "solaris": _numbered([
        "SIGHUP", "SIGINT", "SIGQUIT", "SIGILL", "SIGTRAP", "SIGABRT", "SIGEMT", "SIGFPE",
        "SIGKILL", "SIGBUS", "SIGSEGV", "SIGSYS", "SIGPIPE", "SIGALRM", "SIGTERM",
        "SIGUSR1", "SIGUSR2", "SIGCHLD", "SIGPWR", "SIGWINCH", "SIGURG", "SIGIO",
        "SIGSTOP", "SIGTSTP", "SIGCONT", "SIGTTIN", "SIGTTOU", "SIGVTALRM", "SIGPROF",
        "SIGXCPU", "SIGXFSZ", "SIGWAITING", "SIGLWP", "SIGFREEZE", "SIGTHAW",
        "SIGCANCEL", "SIGLOST", "SIGXRES", "SIGJVM1", "SIGJVM2",
    ]),
    "windows": {},
}

_PLATFORM_PREFIXES = [
    ("linux", "linux"),
    ("darwin", "darwin"),
    ("win32", "windows"),
    ("cygwin", "windows"),
    ("windows", "windows"),
    ("freebsd", "freebsd"),
    ("openbsd", "openbsd"),
    ("netbsd", "netbsd"),
    ("dragonfly", "dragonfly"),
    ("sunos", "solaris"),
    ("solaris", "solaris"),
]

_EXIT_CODES = {
    1: "ERROR",
    2: "USAGE",
    127: "NOTFOUND",
}


def _platform_key(platform):
    for prefix, key in _PLATFORM_PREFIXES:
        if platform.startswith(prefix):
            return key
    return None


def signals_for(platform=None):
    """Map signal numbers to names for *platform* (a ``sys.platform`` value or OS name).

    With no platform the running system is used, and an unknown system has no names.
    """
    if platform is None:
        key = _platform_key(sys.platform)
        return dict(_SIGNALS[key]) if key else {}
    key = _platform_key(platform.lower())
    if key is None:
        raise ValueError(f"unknown platform: {platform!r}")
    return dict(_SIGNALS[key])


def meaning_of_exit_code(exit_code, signals=None):
    """Return a readable name for *exit_code*, or the number itself as text."""
    if signals is None:
        signals = signals_for()
    if exit_code < 128:
        name = _EXIT_CODES.get(exit_code)
    else:
        name = signals.get(exit_code - 128)
    return name if name is not None else str(exit_code)