from flashbot.utils.misc import __version__, _python_version

USER_AGENT: str = f"Flashbot/{__version__} (Python/{_python_version})"
