from .bindings import bindings
from .build import build
from .classify import classify
from .config import config
from .doctor import doctor
from .log import log
from .resolve import resolve
from .sources import sources
from .version import version

__all__ = ["bindings", "build", "classify", "config", "doctor", "log", "resolve", "sources", "version"]
